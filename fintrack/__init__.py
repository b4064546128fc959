import os

__version__ = "0.1.0"


SRC_PATH = os.path.dirname(os.path.abspath(__file__))
SEED_PATH = os.environ.get('FINTRACK_SEED_PATH', os.path.join(SRC_PATH, 'data', 'seed.json'))
SERIES_MONTHS = int(os.environ.get('FINTRACK_SERIES_MONTHS', 6))
BILLS_LIMIT = int(os.environ.get('FINTRACK_BILLS_LIMIT', 5))
