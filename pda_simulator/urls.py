from django.urls import path
from . import views

urlpatterns = [
    # Acceptance and traced runs
    path('api/simulate-pda/', views.simulate_pda, name='simulate_pda'),
    path('api/step-through-pda/', views.step_through_pda, name='step_through_pda'),

    # Fuzz search over all words up to a length
    path('api/fuzz-pda/', views.fuzz_pda_view, name='fuzz_pda'),
    path('api/fuzz-pda-stream/', views.fuzz_pda_stream, name='fuzz_pda_stream'),

    # Utility endpoint to check that a definition builds
    path('api/check-pda/', views.check_pda, name='check_pda'),
]
