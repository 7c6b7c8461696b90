"""Simulation version identifier: ``MAJOR.MINOR.MAINTENANCE[-TESTTYPE.TESTNUMBER]``.

Examples: ``1.2.0``, ``1.2.0-rc.3``, ``1.3.0-dev.14``, ``1.2.0-someOneOff.0``.

Ordering looks at ``(major, minor, maintenance)`` only.  Two
versions that differ only in their test suffix compare as equal through
``compare``, ``is_after`` and ``is_before_or_equal_to``.  Structural equality
(``==``) still compares every field.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic import ValidationError as PydanticValidationError

from simdeploy.errors import ParseError, ValidationError

VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)(-([^.-]+)\.(\d+))?$")


class SimVersion(BaseModel):
    """Immutable simulation version.

    Numeric fields accept numeric strings and are coerced.  ``test_number``
    must be present exactly when ``test_type`` is.

    Raises ``simdeploy.errors.ValidationError`` naming the offending field
    on any invalid input.
    """

    model_config = ConfigDict(frozen=True)

    major: NonNegativeInt
    minor: NonNegativeInt
    maintenance: NonNegativeInt
    # "dev", "rc", or a one-off branch name
    test_type: str | None = Field(default=None, pattern=r"^[^.-]+$")
    test_number: NonNegativeInt | None = None
    build_timestamp: str | None = None

    def __init__(
        self,
        major: int | str,
        minor: int | str,
        maintenance: int | str,
        *,
        test_type: str | None = None,
        test_number: int | str | None = None,
        build_timestamp: str | None = None,
    ) -> None:
        try:
            super().__init__(
                major=major,
                minor=minor,
                maintenance=maintenance,
                test_type=test_type,
                test_number=test_number,
                build_timestamp=build_timestamp,
            )
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else None
            raise ValidationError(
                f"Invalid version field {field}: {error['msg']} (got {error.get('input')!r})",
                field=field,
            ) from exc

        if self.test_type is not None and self.test_number is None:
            raise ValidationError(
                f"test_number is required when test_type is set (test_type={self.test_type!r})",
                field="test_number",
            )
        if self.test_type is None and self.test_number is not None:
            raise ValidationError(
                f"test_type is required when test_number is set (test_number={self.test_number})",
                field="test_type",
            )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str, build_timestamp: str | None = None) -> SimVersion:
        """Parse a version string such as ``1.2.3`` or ``1.2.3-rc.1``."""
        match = VERSION_PATTERN.match(text)
        if not match:
            raise ParseError(f"Could not parse version: {text!r}", field="version")
        major, minor, maintenance, _, test_type, test_number = match.groups()
        return cls(
            major,
            minor,
            maintenance,
            test_type=test_type,
            test_number=test_number,
            build_timestamp=build_timestamp,
        )

    @classmethod
    def from_branch(cls, branch: str) -> SimVersion:
        """Version implied by a release branch name: ``"1.3"`` -> ``1.3.0``."""
        bits = branch.split(".")
        if len(bits) != 2 or not all(bit.isdigit() for bit in bits):
            raise ValidationError(
                f"Bad branch, should be {{MAJOR}}.{{MINOR}}, had: {branch!r}",
                field="branch",
            )
        return cls(bits[0], bits[1], 0)

    @classmethod
    def ensure_release_branch(cls, branch: str) -> SimVersion:
        """Validate a release branch name and return its implied version."""
        version = cls.from_branch(branch.split("-")[0])
        if version.major <= 0:
            raise ValidationError(
                f"Major version for a branch should be greater than zero: {branch!r}",
                field="major",
            )
        if version.minor < 0:
            raise ValidationError(
                f"Minor version for a branch should be greater than or equal to zero: {branch!r}",
                field="minor",
            )
        return version

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    @staticmethod
    def comparator(a: SimVersion, b: SimVersion) -> int:
        """Three-way comparison over ``(major, minor, maintenance)`` only.

        Usable with ``functools.cmp_to_key``.
        """
        left = (a.major, a.minor, a.maintenance)
        right = (b.major, b.minor, b.maintenance)
        if left < right:
            return -1
        if left > right:
            return 1
        return 0

    def compare(self, other: SimVersion) -> int:
        return SimVersion.comparator(self, other)

    def is_after(self, other: SimVersion) -> bool:
        return self.compare(other) == 1

    def is_before_or_equal_to(self, other: SimVersion) -> bool:
        return self.compare(other) <= 0

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_published(self) -> bool:
        """Whether this version is past the pre-publication series.

        ``0.x.y`` versions and the ``1.0.0-<test>`` series precede the first
        public release.
        """
        if self.major < 1:
            return False
        if (
            self.major == 1
            and self.minor == 0
            and self.maintenance == 0
            and self.test_type is not None
        ):
            return False
        return True

    @property
    def branch_name(self) -> str:
        """Release branch this version belongs to (``MAJOR.MINOR``)."""
        return f"{self.major}.{self.minor}"

    # ------------------------------------------------------------------
    # Formatting and serialization
    # ------------------------------------------------------------------

    def to_string(self) -> str:
        text = f"{self.major}.{self.minor}.{self.maintenance}"
        if self.test_type is not None:
            text += f"-{self.test_type}.{self.test_number}"
        return text

    def __str__(self) -> str:
        return self.to_string()

    def serialize(self) -> dict[str, Any]:
        """Plain record with the camelCase keys used in JSON state files."""
        return {
            "major": self.major,
            "minor": self.minor,
            "maintenance": self.maintenance,
            "testType": self.test_type,
            "testNumber": self.test_number,
            "buildTimestamp": self.build_timestamp,
        }

    @classmethod
    def deserialize(cls, data: dict[str, Any]) -> SimVersion:
        """Inverse of ``serialize``."""
        return cls(
            data["major"],
            data["minor"],
            data["maintenance"],
            test_type=data.get("testType"),
            test_number=data.get("testNumber"),
            build_timestamp=data.get("buildTimestamp"),
        )
