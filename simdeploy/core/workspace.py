"""Filesystem view of the checkout root holding sibling repositories.

Layout::

    <root>/
        <repo>/package.json          version, phet.supportedBrands, phet.published
        <repo>/dependencies.json     repo name -> {sha, branch}
        <repo>/assets/<repo>-screenshot.png
        <repo>/build/<brand>/...     build output
        chipper/  perennial-alias/   toolchain repos

JSON files are rewritten with two-space indentation, key order preserved
and a trailing newline, matching what the build tooling itself writes.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from simdeploy.errors import PreconditionError
from simdeploy.models.versioning import SimVersion

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
DEPENDENCIES_JSON = "dependencies.json"


class Workspace:
    """Reads and writes the state files of repos under a common root.

    Parameters
    ----------
    root:
        Directory containing one checkout per repository.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def repo_path(self, repo: str) -> Path:
        return self.root / repo

    # ------------------------------------------------------------------
    # package.json
    # ------------------------------------------------------------------

    def read_package(self, repo: str) -> dict[str, Any]:
        path = self.repo_path(repo) / PACKAGE_JSON
        if not path.exists():
            raise PreconditionError(f"No {PACKAGE_JSON} found for {repo} at {path}")
        return json.loads(path.read_text(encoding="utf-8"))

    def write_package(self, repo: str, data: dict[str, Any]) -> Path:
        path = self.repo_path(repo) / PACKAGE_JSON
        _write_json(path, data)
        return path

    def get_version(self, repo: str) -> SimVersion:
        return SimVersion.parse(self.read_package(repo)["version"])

    def set_version(self, repo: str, version: SimVersion) -> Path:
        data = self.read_package(repo)
        data["version"] = str(version)
        logger.debug("Writing version %s to %s/%s", version, repo, PACKAGE_JSON)
        return self.write_package(repo, data)

    def supported_brands(self, repo: str) -> list[str]:
        return list(self.read_package(repo).get("phet", {}).get("supportedBrands", []))

    def set_supported_brands(self, repo: str, brands: list[str]) -> Path:
        data = self.read_package(repo)
        data.setdefault("phet", {})["supportedBrands"] = list(brands)
        return self.write_package(repo, data)

    def is_published(self, repo: str) -> bool:
        return bool(self.read_package(repo).get("phet", {}).get("published", False))

    def phetio_validation_disabled(self, repo: str) -> bool:
        """True when ``phet.phet-io.validation`` is explicitly ``false``."""
        phetio = self.read_package(repo).get("phet", {}).get("phet-io", {})
        return "validation" in phetio and not phetio["validation"]

    # ------------------------------------------------------------------
    # Assets and build output
    # ------------------------------------------------------------------

    def screenshot_path(self, repo: str) -> Path:
        return self.repo_path(repo) / "assets" / f"{repo}-screenshot.png"

    def has_screenshot(self, repo: str) -> bool:
        return self.screenshot_path(repo).exists()

    def build_dir(self, repo: str, brand: str) -> Path:
        return self.repo_path(repo) / "build" / brand

    # ------------------------------------------------------------------
    # dependencies.json
    # ------------------------------------------------------------------

    def dependencies(self, repo: str) -> dict[str, Any]:
        path = self.repo_path(repo) / DEPENDENCIES_JSON
        if not path.exists():
            return {}
        return json.loads(path.read_text(encoding="utf-8"))

    def dependency_repos(self, repo: str) -> list[str]:
        """Repos listed in ``dependencies.json``, always including *repo* itself."""
        names = [name for name in self.dependencies(repo) if name != "comment"]
        if repo not in names:
            names.insert(0, repo)
        return names

    def copy_build_dependencies(self, repo: str, brand: str) -> Path:
        """Copy ``build/<brand>/dependencies.json`` into the repo root."""
        source = self.build_dir(repo, brand) / DEPENDENCIES_JSON
        if not source.exists():
            raise PreconditionError(
                f"Build output has no {DEPENDENCIES_JSON}: {source}"
            )
        target = self.repo_path(repo) / DEPENDENCIES_JSON
        shutil.copyfile(source, target)
        logger.info("Copied %s into %s", source, target)
        return target


def _write_json(path: Path, data: dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
