from django.http import JsonResponse, StreamingHttpResponse
from django.views.decorators.http import require_GET, require_POST
from django.views.decorators.csrf import csrf_exempt
import json
import logging

from .conf import get_setting
from .example_machines import EXAMPLE_MACHINES
from .tm_description import machine_from_dict, configuration_from_dict, validate_tm_structure
from .tm_graph import compute_config_graph
from .tm_properties import is_deterministic, check_all_properties
from .tm_running import ExecutionController

logger = logging.getLogger(__name__)


def _positive_int(value, name: str, maximum: int) -> int:
    """Validates a positive integer request parameter and caps it at maximum."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f'{name} must be an integer')
    if value <= 0:
        raise ValueError(f'{name} must be a positive integer')
    return min(value, maximum)


def _load_machine(data):
    """
    Reads the machine description of a request.

    Returns:
        (machine, error_response); exactly one of them is None
    """
    description = data.get('machine')
    if not description:
        return None, JsonResponse({'error': 'Missing machine definition'}, status=400)

    validation = validate_tm_structure(description)
    if not validation['valid']:
        return None, JsonResponse({'error': validation['error']}, status=400)

    return machine_from_dict(description), None


def _step_payload(record):
    return {
        'step': record.number,
        'from_state': record.from_state,
        'transition_index': record.transition_index,
        'configuration': record.configuration.to_dict()
    }


@require_GET
def list_examples(request):
    """Lists the bundled example machines."""
    return JsonResponse({'examples': EXAMPLE_MACHINES})


@csrf_exempt
@require_POST
def next_configurations_view(request):
    """
    Django view returning the direct successors of a configuration.

    Expects a POST request with a JSON body containing:
    - machine: The machine description
    - configuration: Optional configuration, defaults to the start configuration
    """
    try:
        data = json.loads(request.body)
        machine, error = _load_machine(data)
        if error:
            return error

        controller = ExecutionController(machine)
        config = controller.get_start_configuration()
        if data.get('configuration') is not None:
            config = configuration_from_dict(data['configuration'], machine.tape_count)

        transitions = machine.transitions.get(config.state)
        successors = controller.next_configurations_from_state(config)

        return JsonResponse({
            'configuration': config.to_dict(),
            'known_state': transitions is not None,
            'next': [
                {
                    'configuration': next_config.to_dict(),
                    'transition_index': index,
                    'transition': transitions[index].to_dict()
                }
                for next_config, index in successors
            ],
            'halted': not successors
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('next_configurations_view failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def config_graph_view(request):
    """
    Django view computing the configuration graph of a machine.

    Expects a POST request with a JSON body containing:
    - machine: The machine description
    - min_nodes: Optional target node count
    - configuration: Optional configuration to start from instead of the start configuration
    """
    try:
        data = json.loads(request.body)
        machine, error = _load_machine(data)
        if error:
            return error

        max_nodes = get_setting('MAX_GRAPH_NODES')
        min_nodes = _positive_int(data.get('min_nodes', get_setting('GRAPH_MIN_NODES')), 'min_nodes', max_nodes)

        start = machine.start_configuration()
        if data.get('configuration') is not None:
            start = configuration_from_dict(data['configuration'], machine.tape_count)

        graph = compute_config_graph(start, min_nodes, machine.transitions, machine.tape_count, machine.blank)

        response_data = graph.to_dict()
        response_data['complete'] = not graph.frontier()
        response_data['halting'] = graph.halting_nodes()
        return JsonResponse(response_data)

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('config_graph_view failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def check_deterministic(request):
    """
    Django view checking a transition table for nondeterminism conflicts.

    Expects a POST request with a JSON body containing:
    - machine: The machine description
    - exhaustive: Optional, report every conflicting pair instead of the first one
    """
    try:
        data = json.loads(request.body)
        machine, error = _load_machine(data)
        if error:
            return error

        result = is_deterministic(machine.transitions, exhaustive=bool(data.get('exhaustive', False)))

        return JsonResponse({
            'deterministic': result['result'],
            'conflicts': [transition.to_dict() for transition in result['conflicts']],
            'type': 'DTM' if result['result'] else 'NTM'
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('check_deterministic failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def check_tm_properties(request):
    """
    Django view reporting all static properties of a transition table.
    """
    try:
        data = json.loads(request.body)
        machine, error = _load_machine(data)
        if error:
            return error

        properties = check_all_properties(machine.transitions, machine.start_state)
        properties['conflicts'] = [transition.to_dict() for transition in properties['conflicts']]
        return JsonResponse(properties)

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('check_tm_properties failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def run_machine(request):
    """
    Django view running a machine from its start configuration.

    The run stops when the machine halts, reaches a nondeterministic branch or
    max_steps steps were made.

    Expects a POST request with a JSON body containing:
    - machine: The machine description
    - max_steps: Optional step limit
    """
    try:
        data = json.loads(request.body)
        machine, error = _load_machine(data)
        if error:
            return error

        max_run_steps = get_setting('MAX_RUN_STEPS')
        max_steps = _positive_int(data.get('max_steps', max_run_steps), 'max_steps', max_run_steps)

        controller = ExecutionController(machine)
        controller.compute_config_graph()
        steps = [_step_payload(record) for record in controller.run(max_steps)]

        outcome = controller.last_outcome.value if len(steps) < max_steps else 'step_limit'

        return JsonResponse({
            'steps': steps,
            'num_steps': len(steps),
            'outcome': outcome,
            'final_configuration': controller.get_current_configuration().to_dict(),
            'graph_size': len(controller.graph)
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('run_machine failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def run_machine_stream(request):
    """
    Django view streaming the steps of a run using Server-Sent Events format.
    """
    try:
        data = json.loads(request.body)
        description = data.get('machine')

        if not description:
            def error_generator():
                yield f"data: {json.dumps({'error': 'Missing machine definition'})}\n\n"

            return StreamingHttpResponse(
                error_generator(),
                content_type='text/event-stream',
                status=400
            )

        validation = validate_tm_structure(description)
        if not validation['valid']:
            def error_generator():
                yield f"data: {json.dumps({'error': validation['error']})}\n\n"

            return StreamingHttpResponse(
                error_generator(),
                content_type='text/event-stream',
                status=400
            )

        max_run_steps = get_setting('MAX_RUN_STEPS')
        max_steps = _positive_int(data.get('max_steps', max_run_steps), 'max_steps', max_run_steps)
        controller = ExecutionController(machine_from_dict(description))

        def result_generator():
            """Generator to stream the run as Server-Sent Events"""
            try:
                controller.compute_config_graph()
                number = 0
                for record in controller.run(max_steps):
                    number = record.number
                    yield f"data: {json.dumps(dict(_step_payload(record), type='step'))}\n\n"

                outcome = controller.last_outcome.value if number < max_steps else 'step_limit'
                yield f"data: {json.dumps({'type': 'summary', 'num_steps': number, 'outcome': outcome})}\n\n"

                # Send end-of-stream marker
                yield f"data: {json.dumps({'type': 'end'})}\n\n"

            except Exception as e:
                logger.exception('run_machine_stream failed')
                yield f"data: {json.dumps({'type': 'error', 'message': str(e)})}\n\n"

        response = StreamingHttpResponse(result_generator(), content_type='text/event-stream')
        response['Cache-Control'] = 'no-cache'
        response['X-Accel-Buffering'] = 'no'  # Disable nginx buffering

        return response

    except ValueError as e:
        message = str(e)

        def error_generator():
            yield f"data: {json.dumps({'error': message})}\n\n"

        return StreamingHttpResponse(
            error_generator(),
            content_type='text/event-stream',
            status=400
        )
    except Exception as e:
        logger.exception('run_machine_stream failed')
        message = f'Server error: {str(e)}'

        def error_generator():
            yield f"data: {json.dumps({'error': message})}\n\n"

        return StreamingHttpResponse(
            error_generator(),
            content_type='text/event-stream',
            status=500
        )
