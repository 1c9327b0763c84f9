"""
Pytest configuration and shared fixtures
"""
import sys
from pathlib import Path

import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import OperationDescriptor, OperationKind


SAMPLE_SDL = """
type User {
  id: ID!
  name: String
}

type Query {
  getUsers: [User!]!
  getUser(id: ID!): User
}

type Mutation {
  createUser(name: String!): User
  deleteUser(id: ID!): Boolean @deprecated(reason: "use archiveUser")
}

type Subscription {
  onUserCreated: User
}
"""


@pytest.fixture
def sample_sdl_path(tmp_path):
    """SDL file with two queries, two mutations and one subscription"""
    path = tmp_path / "schema.graphql"
    path.write_text(SAMPLE_SDL, encoding="utf-8")
    return path


@pytest.fixture
def catalog():
    """Fresh catalog with one operation of each kind"""
    return [
        OperationDescriptor("getUsers", OperationKind.QUERY),
        OperationDescriptor("createUser", OperationKind.MUTATION),
        OperationDescriptor("onUserCreated", OperationKind.SUBSCRIPTION),
    ]
