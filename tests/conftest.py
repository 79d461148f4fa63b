"""Test configuration and fixtures."""

import os
import sys
import unittest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(os.path.dirname(__file__))))

from src.db.models import Base
from src.forecast.types import Transaction

# Use an in-memory SQLite database shared across threads for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Create test engine and session factory
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

AS_OF = date(2024, 6, 1)


def setup_test_db():
    """Create all tables in the test database."""
    Base.metadata.create_all(bind=test_engine)


def teardown_test_db():
    """Drop all tables from the test database."""
    Base.metadata.drop_all(bind=test_engine)


def make_transactions(count, as_of=AS_OF, gross=100.0, start_days_ago=45, prefix="t"):
    """Build count orders one per day, the first start_days_ago days before as_of.

    Each order has explicit fees, no shipping/ads and zero return and
    chargeback rates, so its net amount equals gross minus 15.
    """
    return [
        Transaction(
            id=f"{prefix}{i:03d}",
            transaction_date=as_of - timedelta(days=start_days_ago - i),
            gross_amount=gross,
            fee_amount=-15.0,
            return_rate=0.0,
            chargeback_rate=0.0,
        )
        for i in range(count)
    ]


class BaseTestCase(unittest.TestCase):
    """Base test case with database setup and teardown."""

    @classmethod
    def setUpClass(cls):
        """Set up test database once for the test case."""
        setup_test_db()

    @classmethod
    def tearDownClass(cls):
        """Tear down test database after all tests."""
        teardown_test_db()

    def setUp(self):
        """Set up a new database session for each test."""
        self.db = TestSessionLocal()

    def tearDown(self):
        """Close the database session and empty every table after each test."""
        self.db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            self.db.execute(table.delete())
        self.db.commit()
        self.db.close()
