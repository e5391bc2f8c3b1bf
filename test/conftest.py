"""
Test configuration for the While evaluator tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser


@pytest.fixture(scope="session")
def parser():
  """One parser for the whole session; grammars are stateless"""
  return create_parser()


@pytest.fixture
def programs_dir():
  return project_root / "programs"
