"""
tests/conftest.py
Shared fixtures for the crudgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary project trees built under pytest's tmp_path.
"""

from __future__ import annotations

import logging
import pathlib
import textwrap
from typing import Dict

import pytest

from crudgen.models import GeneratorConfig, ModelDefinition
from crudgen.schema import extract_model


# ---------------------------------------------------------------------------
# Schema text
# ---------------------------------------------------------------------------

WIDGET_SCHEMA: str = textwrap.dedent(
    """\
    generator client {
      provider = "prisma-client-js"
    }

    datasource db {
      provider = "mysql"
      url      = env("DATABASE_URL")
    }

    model User {
      id        Int       @id @default(autoincrement())
      email     String    @unique
      createdAt DateTime  @default(now())
      updatedAt DateTime  @updatedAt
      deletedAt DateTime?
    }

    model Widget {
      id          Int       @id @default(autoincrement())
      name        String    @unique
      description String?
      price       Float
      active      Boolean   @default(true)
      tags        String[]
      launchedAt  DateTime?
      createdAt   DateTime  @default(now())
      updatedAt   DateTime  @updatedAt
      deletedAt   DateTime?

      @@index([name])
      // relation starts
      ownerId     Int
      owner       User      @relation(fields: [ownerId], references: [id])
    }
    """
)

ONE_LINE_SCHEMA: str = (
    "model Widget { id Int @id; name String @unique; qty Int; deletedAt DateTime? }\n"
)


# ---------------------------------------------------------------------------
# Shared (registry) files of the target project
# ---------------------------------------------------------------------------

DI_REGISTRY: str = textwrap.dedent(
    """\
    import { Container } from 'inversify';
    import { UserController } from '../controllers/userController';
    import { UserService } from '../services/userService';

    const container = new Container();

    container.bind<UserController>(UserController).toSelf();
    container.bind<UserService>(UserService).toSelf();

    export default container;
    """
)

ROUTE_AGGREGATOR: str = textwrap.dedent(
    """\
    import { Router } from 'express';
    import authMiddleware from '../middlewares/authMiddleware';
    import UserRoutes from './userRoutes';

    const router = Router();

    router.use('/api/v1/users', authMiddleware, UserRoutes);

    export default router;
    """
)

DOC_AGGREGATOR: str = textwrap.dedent(
    """\
    import userPaths from './paths/userPaths';
    // Path Imports ends
    import userDefinitions from './definitions/userDefinition';
    // Definition Imports ends

    const swaggerDocument = {
      paths: {
        ...userPaths,
        // register new paths here
      },
      definitions: {
        ...userDefinitions,
        // register new defintions here
      },
    };

    export default swaggerDocument;
    """
)

SHARED_FILES: Dict[str, str] = {
    "src/config/inversifyConfig.ts": DI_REGISTRY,
    "src/routes/v1.ts": ROUTE_AGGREGATOR,
    "src/config/swagger/swaggerConfig.ts": DOC_AGGREGATOR,
}


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_crudgen_logging():
    """Undo any logger configuration done by the CLI during a test."""
    yield
    logging.disable(logging.NOTSET)
    root_logger = logging.getLogger("crudgen")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def widget_model() -> ModelDefinition:
    """The Widget entity extracted from WIDGET_SCHEMA."""
    return extract_model(WIDGET_SCHEMA, "Widget")


@pytest.fixture()
def one_line_model() -> ModelDefinition:
    """The Widget entity extracted from the single-line block."""
    return extract_model(ONE_LINE_SCHEMA, "Widget")


# ---------------------------------------------------------------------------
# Project-tree fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def project_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """A minimal target project: schema file plus the three shared files."""
    root = tmp_path / "project"
    schema_path = root / "db" / "prisma" / "schema.prisma"
    schema_path.parent.mkdir(parents=True)
    schema_path.write_text(WIDGET_SCHEMA, encoding="utf-8")

    for relative, content in SHARED_FILES.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture()
def config(project_root: pathlib.Path) -> GeneratorConfig:
    """Default configuration rooted at the temporary project."""
    return GeneratorConfig(project_root=str(project_root))


@pytest.fixture()
def widget_schema() -> str:
    """Schema text holding the User and Widget entities."""
    return WIDGET_SCHEMA


@pytest.fixture()
def shared_files() -> Dict[str, str]:
    """Initial content of the three shared files, keyed by relative path."""
    return dict(SHARED_FILES)
