from django.urls import path
from . import views

urlpatterns = [
    # Bundled example machines
    path('api/examples/', views.list_examples, name='list_examples'),

    # Successors of a single configuration
    path('api/next-configurations/', views.next_configurations_view, name='next_configurations'),

    # Configuration graph computation
    path('api/config-graph/', views.config_graph_view, name='config_graph'),

    # Running from the start configuration
    path('api/run/', views.run_machine, name='run_machine'),
    path('api/run-stream/', views.run_machine_stream, name='run_machine_stream'),

    # Property checking endpoints
    path('api/check-deterministic/', views.check_deterministic, name='check_deterministic'),
    path('api/check-tm-properties/', views.check_tm_properties, name='check_tm_properties'),
]
