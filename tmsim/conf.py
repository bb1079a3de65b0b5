from django.conf import settings

DEFAULTS = {
    # Nodes requested when stepping into a configuration that is not expanded yet
    'STEP_BATCH_NODES': 10,
    # Seconds between two steps of a live run
    'RUN_STEP_DELAY': 0.7,
    # Default size of a freshly computed configuration graph
    'GRAPH_MIN_NODES': 50,
    # Upper bound for graph sizes requested through the API
    'MAX_GRAPH_NODES': 5000,
    # Upper bound for the number of steps of a run requested through the API
    'MAX_RUN_STEPS': 1000,
}


def get_setting(name: str):
    """
    Reads a simulator setting from settings.TMSIM, falling back to DEFAULTS.

    Works without configured Django settings, so the core can be used as a plain
    library.
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown simulator setting: {name}")

    if settings.configured:
        overrides = getattr(settings, 'TMSIM', {}) or {}
        if name in overrides:
            return overrides[name]
    return DEFAULTS[name]
