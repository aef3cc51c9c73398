import os

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pda_simulator.tests.settings')
django.setup()
