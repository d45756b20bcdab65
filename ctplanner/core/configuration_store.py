"""Configuration store — scanner system profiles and their detectors.

Loads the built-in system profiles from ``data/systems/*.json`` and
provides lookup plus one validated, atomic update operation
(``apply_settings``).

Profiles are immutable. An update parses every supplied field, builds a
new SystemProfile and swaps it in under a lock, so a reader sees either
the old or the new profile, never a mix.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import pathlib
import re
import threading
from typing import Any, Iterable, Mapping

from ctplanner.core.errors import NotFoundError, ValidationError
from ctplanner.models.system import DetectorProfile, SystemProfile

logger = logging.getLogger(__name__)

_DEFAULT_DATA_DIR = pathlib.Path(__file__).resolve().parents[1] / "data" / "systems"

# Fields the settings update may change
EDITABLE_SYSTEM_FIELDS = (
    "fod", "spot_size", "safety",
    "min_sdd", "max_sdd", "min_sod", "max_sod",
)
EDITABLE_DETECTOR_FIELDS = ("size_h", "tiling_factor")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def normalize_field_name(key: str) -> str:
    """Map a field key to its attribute name.

    Accepts the profile file spelling (``MIN_SDD``, ``sizeH``,
    ``tilingFactor``) and attribute spelling (``min_sdd``, ``size_h``).
    """
    return _CAMEL_BOUNDARY.sub(r"_\1", key.strip()).lower()


def parse_number(field_name: str, value: Any) -> float:
    """Parse a settings value as a finite float.

    Numbers are taken as-is; strings may use ``.`` or ``,`` as decimal
    separator.

    Raises:
        ValidationError: If *value* is missing, not numeric or not finite.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name}: a number is required")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            raise ValidationError(f"{field_name}: {value!r} is not a number") from None
    else:
        raise ValidationError(f"{field_name}: {value!r} is not a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name}: {value!r} is not a finite number")
    return number


def detector_entries_to_fields(
    entries: Iterable[tuple[str, str, Any]],
) -> dict[str, dict[str, Any]]:
    """Fold ``(detector_id, field, value)`` entries into a per-detector mapping.

    Later entries for the same detector field win.
    """
    fields: dict[str, dict[str, Any]] = {}
    for detector_id, field_name, value in entries:
        fields.setdefault(detector_id, {})[field_name] = value
    return fields


def check_profile(profile: SystemProfile) -> None:
    """Check a system profile against the model invariants.

    Raises:
        ValidationError: Listing every violated invariant.
    """
    problems: list[str] = []
    if not profile.min_sdd < profile.max_sdd:
        problems.append(
            f"MIN_SDD ({profile.min_sdd:g}) must be below MAX_SDD ({profile.max_sdd:g})"
        )
    if not profile.min_sod < profile.max_sod:
        problems.append(
            f"MIN_SOD ({profile.min_sod:g}) must be below MAX_SOD ({profile.max_sod:g})"
        )
    if profile.safety < 0:
        problems.append(f"SAFETY ({profile.safety:g}) must not be negative")
    for det in profile.detectors.values():
        if det.size_h <= 0:
            problems.append(f"{det.name}: size H ({det.size_h:g}) must be positive")
        if det.tiling_factor < 1:
            problems.append(
                f"{det.name}: tiling factor ({det.tiling_factor:g}) must be at least 1"
            )
        if det.pixel_h <= 0 or det.pixel_v <= 0:
            problems.append(f"{det.name}: pixel counts must be positive")
    if problems:
        raise ValidationError("; ".join(problems))


class ConfigurationStore:
    """Holds the named system profiles for the session.

    Args:
        data_dir: Directory with system profile JSON files.  If *None*,
                  the built-in ``data/systems/`` directory is used.
    """

    def __init__(self, data_dir: str | pathlib.Path | None = None) -> None:
        self._data_dir = pathlib.Path(data_dir) if data_dir is not None else _DEFAULT_DATA_DIR
        self._systems: dict[str, SystemProfile] = {}
        self._lock = threading.Lock()
        self._load_systems()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def system_ids(self) -> list[str]:
        """System ids in load order."""
        return list(self._systems)

    def get_all_systems(self) -> list[SystemProfile]:
        """Return all loaded system profiles."""
        return list(self._systems.values())

    def get(self, system_id: str) -> SystemProfile:
        """Return a system profile by id.

        Raises:
            NotFoundError: If *system_id* is not loaded.
        """
        try:
            return self._systems[system_id]
        except KeyError:
            raise NotFoundError(f"Unknown system: {system_id!r}") from None

    def get_detector(self, system_id: str, detector_id: str) -> DetectorProfile:
        """Return a detector profile of a system.

        Raises:
            NotFoundError: If the system or the detector is unknown.
        """
        profile = self.get(system_id)
        try:
            return profile.detectors[detector_id]
        except KeyError:
            raise NotFoundError(
                f"Unknown detector {detector_id!r} for system {system_id!r}"
            ) from None

    def resolve_detector_id(self, system_id: str, preferred: str | None) -> str:
        """Keep *preferred* if the system has it, else pick its first detector.

        Raises:
            NotFoundError: If the system is unknown or has no detectors.
        """
        profile = self.get(system_id)
        if preferred in profile.detectors:
            return preferred
        if not profile.detectors:
            raise NotFoundError(f"System {system_id!r} has no detectors")
        return profile.detector_ids[0]

    def apply_settings(
        self,
        system_id: str,
        profile_fields: Mapping[str, Any] | None = None,
        detector_fields: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> SystemProfile:
        """Validate and apply a settings update to one system, all or nothing.

        Args:
            system_id: System to update.
            profile_fields: System field → value (``FOD``, ``SPOT_SIZE``,
                ``SAFETY``, ``MIN_SDD``, ``MAX_SDD``, ``MIN_SOD``, ``MAX_SOD``).
            detector_fields: Detector id → {field → value} with fields
                ``sizeH`` and ``tilingFactor``.  ``sizeH`` is mirrored
                into ``sizeV`` (square panel convention).

        Returns:
            The new SystemProfile.

        Raises:
            NotFoundError: Unknown system or detector id.
            ValidationError: Any field unknown, not a finite number, or
                the resulting profile violating its invariants.  The store
                is left unchanged.
        """
        profile_fields = profile_fields or {}
        detector_fields = detector_fields or {}

        with self._lock:
            current = self.get(system_id)
            for det_id in detector_fields:
                if det_id not in current.detectors:
                    raise NotFoundError(
                        f"Unknown detector {det_id!r} for system {system_id!r}"
                    )

            errors: list[str] = []
            system_updates = _parse_fields(
                profile_fields, EDITABLE_SYSTEM_FIELDS, "system", errors,
            )
            detectors = dict(current.detectors)
            for det_id, fields in detector_fields.items():
                updates = _parse_fields(
                    fields, EDITABLE_DETECTOR_FIELDS, det_id, errors,
                )
                if "size_h" in updates:
                    updates["size_v"] = updates["size_h"]
                if updates:
                    detectors[det_id] = dataclasses.replace(detectors[det_id], **updates)

            if errors:
                logger.warning("Settings for %s rejected: %s", system_id, "; ".join(errors))
                raise ValidationError("; ".join(errors))

            updated = dataclasses.replace(current, detectors=detectors, **system_updates)
            try:
                check_profile(updated)
            except ValidationError as exc:
                logger.warning("Settings for %s rejected: %s", system_id, exc)
                raise

            self._systems[system_id] = updated

        logger.info(
            "Settings applied to %s (%d system fields, %d detectors)",
            system_id, len(system_updates), len(detector_fields),
        )
        return updated

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load_systems(self) -> None:
        """Load all system JSON files into the store."""
        if not self._data_dir.is_dir():
            logger.warning("System profile directory not found: %s", self._data_dir)
            return
        for filepath in sorted(self._data_dir.glob("*.json")):
            try:
                profile = load_system_file(filepath)
            except (OSError, KeyError, TypeError, ValueError):
                logger.exception("Failed to load system profile from %s", filepath)
                continue
            self._systems[profile.id] = profile
            logger.debug("Loaded system %s (%d detectors)", profile.id, len(profile.detectors))


def _parse_fields(
    fields: Mapping[str, Any],
    allowed: tuple[str, ...],
    owner: str,
    errors: list[str],
) -> dict[str, float]:
    """Parse one group of fields, appending problems to *errors*."""
    parsed: dict[str, float] = {}
    for key, raw in fields.items():
        attr = normalize_field_name(key)
        if attr not in allowed:
            errors.append(f"{owner}: unknown field {key!r}")
            continue
        try:
            parsed[attr] = parse_number(f"{owner} {key}", raw)
        except ValidationError as exc:
            errors.append(str(exc))
    return parsed


def load_system_file(filepath: pathlib.Path) -> SystemProfile:
    """Parse a single system profile JSON file."""
    with open(filepath, encoding="utf-8") as f:
        raw = json.load(f)

    detectors: dict[str, DetectorProfile] = {}
    for entry in raw.get("detectors", []):
        det_id = str(entry["detector_id"])
        size_h = parse_number(f"{det_id} sizeH", entry["sizeH"])
        detectors[det_id] = DetectorProfile(
            id=det_id,
            name=entry.get("name", det_id),
            pixel_h=int(entry["pixelH"]),
            pixel_v=int(entry["pixelV"]),
            size_h=size_h,
            size_v=parse_number(f"{det_id} sizeV", entry.get("sizeV", size_h)),
            pixel_size=parse_number(f"{det_id} pixelSize", entry["pixelSize"]),
            tiling_factor=parse_number(f"{det_id} tilingFactor", entry.get("tilingFactor", 1.0)),
        )

    system_id = str(raw.get("system_id", filepath.stem))
    profile = SystemProfile(
        id=system_id,
        name=raw.get("name", system_id),
        fod=parse_number("FOD", raw["FOD"]),
        spot_size=parse_number("SPOT_SIZE", raw.get("SPOT_SIZE", 0.0)),
        safety=parse_number("SAFETY", raw["SAFETY"]),
        min_sdd=parse_number("MIN_SDD", raw["MIN_SDD"]),
        max_sdd=parse_number("MAX_SDD", raw["MAX_SDD"]),
        min_sod=parse_number("MIN_SOD", raw["MIN_SOD"]),
        max_sod=parse_number("MAX_SOD", raw["MAX_SOD"]),
        detectors=detectors,
    )
    check_profile(profile)
    return profile
