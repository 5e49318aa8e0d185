import pytest

from core.data import build_frame


SAMPLE_ROWS = [
    {"topic": "Energy", "sector": "Power", "region": "North America", "intensity": 8, "relevance": 7, "likelihood": 6,
     "country": "United States", "end_year": 2025, "start_year": 2020, "pestle": "Economic", "source": "News"},
    {"topic": "Technology", "sector": "IT", "region": "Asia", "intensity": 9, "relevance": 8, "likelihood": 7,
     "country": "China", "end_year": "2024", "pestle": "Technological", "source": "Reports"},
    {"topic": "Climate", "sector": "Environment", "region": "Europe", "intensity": 7, "relevance": 6, "likelihood": 8,
     "country": "Germany", "start_year": 2022, "pestle": "Environmental", "source": "Research"},
    {"topic": "Finance", "sector": "Banking", "region": "North America", "intensity": 6, "relevance": 7, "likelihood": 5,
     "country": "Canada", "end_year": 2025, "pestle": "Economic", "source": "News"},
    {"topic": "Healthcare", "sector": "Medical", "region": "Asia", "intensity": 8, "relevance": 9, "likelihood": 7,
     "country": "Japan", "pestle": "Social", "source": "Government"},
    {"topic": "Energy", "sector": "Power", "region": "", "intensity": 6, "relevance": 3, "likelihood": 2,
     "country": "India", "end_year": 2027, "pestle": "Political", "source": "News"},
]


@pytest.fixture
def sample_rows():
    return [dict(r) for r in SAMPLE_ROWS]


@pytest.fixture
def sample_frame(sample_rows):
    return build_frame(sample_rows)
