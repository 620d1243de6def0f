"""
Project layout: scaffolding and production tree audit.

A layered project has four areas, all configurable:

- prototypes/  notebooks where layers are developed
- src/<pkg>/   production modules named ``layer_NN_<slug>.py``
- tests/       tests, one ``test_layer_NN*.py`` per layer
- docs/        generated documentation, one ``layer_NN*.md`` per layer
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config import LayerDocConfig
from .errors import LayerDocError
from .export import PREAMBLE_MODULE
from .findings import Finding, Severity
from .layers import check_numbering
from .notebook import Cell, CellKind, write_percent

logger = logging.getLogger(__name__)

LAYER_FILE_RE = re.compile(r"^layer_(?P<number>\d+)_(?P<slug>[a-z0-9_]+)\.py$")


@dataclass
class ProjectLayout:
    """Resolved paths of the four project areas."""

    root: Path
    package: str
    prototypes_dir: Path
    src_dir: Path
    tests_dir: Path
    docs_dir: Path

    @classmethod
    def from_config(
        cls,
        root: Union[str, Path],
        package: Optional[str] = None,
        config: Optional[LayerDocConfig] = None,
    ) -> "ProjectLayout":
        settings = (config or LayerDocConfig.default()).layout_settings
        root = Path(root)
        package = package or settings.package or root.resolve().name.replace("-", "_")
        if not package.isidentifier():
            raise LayerDocError(f"Package name '{package}' is not a valid Python identifier")
        return cls(
            root=root,
            package=package,
            prototypes_dir=root / settings.prototypes_dir,
            src_dir=root / settings.src_dir,
            tests_dir=root / settings.tests_dir,
            docs_dir=root / settings.docs_dir,
        )

    @property
    def package_dir(self) -> Path:
        return self.src_dir / self.package

    @property
    def notebook_path(self) -> Path:
        return self.prototypes_dir / f"{self.package}.py"

    def areas(self) -> Dict[str, Path]:
        return {
            "prototypes": self.prototypes_dir,
            "src": self.src_dir,
            "tests": self.tests_dir,
            "docs": self.docs_dir,
        }


STARTER_DOC = """# Layer 0: Base

`{cls}` holds the input the later layers build on.
Describe the constructor arguments and attributes here, then ask for the
implementation cell."""

STARTER_CODE = """class {cls}:
    def __init__(self, value):
        self.value = value"""

STARTER_TEST = '''from {package}.layer_00_base import {cls}


def test_stores_value():
    assert {cls}("x").value == "x"
'''


def _class_name(package: str) -> str:
    return "".join(part.capitalize() for part in package.split("_") if part) or "Base"


def scaffold(layout: ProjectLayout, overwrite: bool = False) -> List[Path]:
    """Create the project areas and starter files; return what was created."""
    created: List[Path] = []

    for area in list(layout.areas().values()) + [layout.package_dir]:
        if not area.exists():
            area.mkdir(parents=True)
            created.append(area)

    cls = _class_name(layout.package)
    starters = {
        layout.package_dir / "__init__.py": f'"""{layout.package} package."""\n',
        layout.tests_dir / "test_layer_00.py": STARTER_TEST.format(package=layout.package, cls=cls),
    }
    for path, content in starters.items():
        if path.exists() and not overwrite:
            logger.info(f"Keeping existing {path}")
            continue
        path.write_text(content, encoding="utf-8")
        created.append(path)

    if overwrite or not layout.notebook_path.exists():
        cells = [
            Cell(0, CellKind.MARKDOWN, STARTER_DOC.format(cls=cls)),
            Cell(1, CellKind.CODE, STARTER_CODE.format(cls=cls)),
        ]
        created.append(write_percent(cells, layout.notebook_path))
    else:
        logger.info(f"Keeping existing {layout.notebook_path}")

    logger.info(f"Scaffolded {len(created)} paths under {layout.root}")
    return created


def audit_tree(layout: ProjectLayout, config: Optional[LayerDocConfig] = None) -> List[Finding]:
    """Check naming, numbering, size, tests and docs of the production tree."""
    settings = (config or LayerDocConfig.default()).layer_settings
    findings: List[Finding] = []

    if not layout.package_dir.is_dir():
        findings.append(
            Finding(
                code="missing_package",
                severity=Severity.ERROR,
                message=f"Package directory {layout.package_dir} does not exist",
                path=str(layout.package_dir),
            )
        )
        return findings

    numbered: List[int] = []
    for path in sorted(layout.package_dir.glob("*.py")):
        if path.name in ("__init__.py", f"{PREAMBLE_MODULE}.py"):
            continue
        match = LAYER_FILE_RE.match(path.name)
        if not match:
            findings.append(
                Finding(
                    code="bad_layer_filename",
                    severity=Severity.WARNING,
                    message=f"{path.name} is not named layer_NN_<slug>.py",
                    path=str(path),
                )
            )
            continue

        number = int(match.group("number"))
        numbered.append(number)

        line_count = len(path.read_text(encoding="utf-8").splitlines())
        if line_count >= settings.max_layer_lines:
            findings.append(
                Finding(
                    code="layer_too_long",
                    severity=Severity.ERROR,
                    message=f"{path.name} has {line_count} lines; keep it under {settings.max_layer_lines}",
                    layer=number,
                    path=str(path),
                    metadata={"line_count": line_count},
                )
            )

        prefix = f"layer_{number:02d}"
        if not any(layout.tests_dir.glob(f"test_{prefix}*.py")):
            findings.append(
                Finding(
                    code="missing_test",
                    severity=Severity.INFO,
                    message=f"No tests/test_{prefix}*.py for {path.name}",
                    layer=number,
                    path=str(path),
                )
            )
        if not any(layout.docs_dir.glob(f"{prefix}*.md")):
            findings.append(
                Finding(
                    code="missing_doc",
                    severity=Severity.INFO,
                    message=f"No docs/{prefix}*.md for {path.name}",
                    layer=number,
                    path=str(path),
                )
            )

    findings.extend(
        check_numbering(sorted(numbered), settings.first_layer_number, str(layout.package_dir))
    )
    return findings
