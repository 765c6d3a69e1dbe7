"""Test configuration."""
import os
import random
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
_test_dir = Path(tempfile.mkdtemp(prefix="wordfarm-test-"))
os.environ.setdefault("DATA_DIR", str(_test_dir / "data"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_test_dir / 'test_wordfarm.db'}")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy.orm import Session

from wordfarm.config import ensure_directories, settings
from wordfarm.models.base import SessionLocal, engine, init_db
from wordfarm.models.farm_models import FarmState
from wordfarm.services.assessment_service import AssessmentEngine
from wordfarm.services.progress_store import ProgressStore
from wordfarm.services.source_parser import parse_source

SAMPLE_SOURCE = "\r\n".join([
    "English,Chinese,Note",
    "budget,n.預算,",
    "audit,n.審計；查帳,finance",
    "# finance words",
    '"fiscal","adj.會計的；財政的",',
    ",orphan meaning,",
    'deficit,n.赤字；不足額,"note, with comma"',
    "",
    "inflation,n.通貨膨脹,",
    "asset,n.資產,",
    "alma mater,n.母校,",
])


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    engine.dispose()
    db_path = settings.database.url.replace("sqlite:///", "")
    if os.path.exists(db_path):
        os.remove(db_path)
    init_db()

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def source_text() -> str:
    """Sample word list in the external CSV format."""
    return SAMPLE_SOURCE


@pytest.fixture
def store(db: Session) -> ProgressStore:
    """Create a progress store instance."""
    return ProgressStore(db)


@pytest.fixture
def state(store: ProgressStore, source_text: str) -> FarmState:
    """Load a farm from the sample source with no stored progress."""
    return store.load(parse_source(source_text))


@pytest.fixture
def assessment(store: ProgressStore) -> AssessmentEngine:
    """Create an assessment engine with a seeded random generator."""
    return AssessmentEngine(store, random.Random(42))
