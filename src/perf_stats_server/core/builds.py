"""Build-server collaborators: build enumeration and artifact lookup.

The cache only needs the ``Build`` protocol. ``DirectoryBuild`` is the
on-disk implementation used by the MCP server: a directory holding a
``build.json`` manifest and an ``artifacts/`` folder.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from .models import FailureReason, TestIdentity

logger = logging.getLogger(__name__)

MANIFEST_NAME = "build.json"
ARTIFACTS_DIR_NAME = "artifacts"


class Build(Protocol):
    """What the cache needs to know about one build."""

    @property
    def build_id(self) -> int:
        ...

    @property
    def artifacts_dir(self) -> Path | None:
        ...

    @property
    def parameters(self) -> Mapping[str, str]:
        ...

    def failure_reasons(self) -> Sequence[FailureReason]:
        ...

    def all_tests(self) -> Sequence[TestIdentity]:
        ...


def find_aggregate_log(build: Build, param_name: str) -> Path | None:
    """Return the artifact named by the build parameter, if present."""
    file_name = build.parameters.get(param_name)
    if not file_name:
        logger.debug("Build %s has no %r parameter", build.build_id, param_name)
        return None

    artifacts = build.artifacts_dir
    if artifacts is None or not artifacts.is_dir():
        return None

    for artifact in artifacts.iterdir():
        if artifact.name == file_name and artifact.is_file():
            return artifact
    logger.debug("Build %s: artifact %r not found in %s", build.build_id, file_name, artifacts)
    return None


class DiscoveredTest(BaseModel):
    full_name: str = Field(min_length=1, description="Group-qualified test name.")
    group_name: str = Field(default="", description="Suite/group the test belongs to.")
    test_name: str | None = Field(default=None, description="Short test name.")


class FailureReasonRecord(BaseModel):
    type: str = Field(description="Problem type tag.")
    test_name: str = Field(description="Full name of the test the problem refers to.")
    description: str | None = None


class BuildManifest(BaseModel):
    build_id: int = Field(ge=0)
    parameters: dict[str, str] = Field(default_factory=dict)
    tests: list[DiscoveredTest] = Field(default_factory=list)
    failure_reasons: list[FailureReasonRecord] = Field(default_factory=list)


class DirectoryBuild:
    """Build backed by ``<root>/build.json`` and ``<root>/artifacts``."""

    def __init__(self, root: Path, manifest: BuildManifest) -> None:
        self.root = root
        self._manifest = manifest
        self._tests = tuple(
            TestIdentity(full_name=t.full_name, group_name=t.group_name, test_name=t.test_name)
            for t in manifest.tests
        )
        self._reasons = tuple(
            FailureReason(type=r.type, test_name=r.test_name, description=r.description)
            for r in manifest.failure_reasons
        )

    @classmethod
    def load(cls, root: str | Path) -> DirectoryBuild:
        """Read and validate the manifest of a build directory."""
        path = Path(root)
        manifest_path = path / MANIFEST_NAME
        if not manifest_path.is_file():
            raise FileNotFoundError(f"Build manifest not found: {manifest_path}")
        try:
            raw = json.loads(manifest_path.read_text(encoding="utf-8"))
            manifest = BuildManifest.model_validate(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Build manifest is not valid JSON: {manifest_path}") from exc
        except ValidationError as exc:
            raise ValueError(f"Invalid build manifest {manifest_path}: {exc}") from exc
        return cls(path, manifest)

    @property
    def build_id(self) -> int:
        return self._manifest.build_id

    @property
    def artifacts_dir(self) -> Path | None:
        return self.root / ARTIFACTS_DIR_NAME

    @property
    def parameters(self) -> Mapping[str, str]:
        return self._manifest.parameters

    def failure_reasons(self) -> Sequence[FailureReason]:
        return self._reasons

    def all_tests(self) -> Sequence[TestIdentity]:
        return self._tests
