from __future__ import annotations

from pathlib import Path

import pytest

from indexgen.models import ProjectIndex
from indexgen.orchestrator import Orchestrator
from tests._fixtures.repo_builder import RepoBuilder

SAMPLE_FILES = {
    "README.md": "# Sample\n\nA small sample project.\n",
    "package.json": '{"name": "sample", "dependencies": {"express": "^4.0.0"}}\n',
    "src/models/User.js": """
        /** User entity. */
        class User {
          constructor(name) {
            this.name = name;
          }
        }
        module.exports = User;
    """,
    "src/controllers/UserController.js": """
        /** Handles user routes. */
        const express = require('express');
        const User = require('../models/User');

        class UserController {
          show(req, res) {
            if (!req.params.id) {
              return res.status(400).end();
            }
            return res.json(new User(req.params.id));
          }
        }

        function register(app) {
          app.get('/users/:id', (req, res) => new UserController().show(req, res));
        }

        module.exports = { UserController, register };
    """,
    "src/views/index.html": "<main>{{ user.name }}</main>\n",
    "src/utils/format.js": "export function formatName(name) { return name.trim(); }\n",
    "tests/user.test.js": "const User = require('../src/models/User');\ntest('user', () => {});\n",
    "node_modules/lib/index.js": "module.exports = 'vendored';\n",
}


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def sample_repo(repo_builder: RepoBuilder) -> RepoBuilder:
    """A small MVC-style JavaScript project with a vendored dependency folder."""
    repo_builder.write(SAMPLE_FILES)
    return repo_builder


@pytest.fixture
def sample_index(sample_repo: RepoBuilder) -> ProjectIndex:
    """Fully enriched and analysed index of ``sample_repo``."""
    return Orchestrator().build_index(sample_repo.config())
