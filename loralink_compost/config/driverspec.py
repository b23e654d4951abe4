from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable


def _require_keys(data: Dict[str, Any], keys: Iterable[str], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        joined = ", ".join(missing)
        raise ValueError(f"missing {context} keys: {joined}")


def _optional_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"1", "true", "on", "yes"}:
            return True
        if text in {"", "0", "false", "off", "no", "none", "null"}:
            return False
    raise ValueError(f"invalid bool value: {value!r}")


@dataclass(frozen=True)
class FormatSpec:
    id: str = "0x2b"
    version: str = "1"
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormatSpec":
        _require_keys(data, ["id"], "format")
        params = data.get("params") or {}
        return cls(
            id=str(data["id"]),
            version=str(data.get("version", "1")),
            params=dict(params),
        )


@dataclass(frozen=True)
class LoggingSpec:
    out_dir: str | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSpec":
        out_dir = data.get("out_dir")
        return cls(out_dir=(str(out_dir) if out_dir else None))


@dataclass(frozen=True)
class DriverSpec:
    run_id: str = "vectors"
    format: FormatSpec = field(default_factory=FormatSpec)
    logging: LoggingSpec = field(default_factory=LoggingSpec)
    banner: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriverSpec":
        _require_keys(data, ["run_id", "format"], "driverspec")
        return cls(
            run_id=str(data["run_id"]),
            format=FormatSpec.from_dict(data["format"]),
            logging=LoggingSpec.from_dict(data.get("logging") or {}),
            banner=_optional_bool(data.get("banner")),
        )

    def validate(self) -> None:
        if not self.run_id:
            raise ValueError("run_id must be non-empty")
        if any(sep in self.run_id for sep in ("/", "\\")):
            raise ValueError(f"run_id must not contain path separators: {self.run_id}")
        if not self.format.id:
            raise ValueError("format id must be non-empty")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "format": {
                "id": self.format.id,
                "version": self.format.version,
                "params": dict(self.format.params),
            },
            "logging": {"out_dir": self.logging.out_dir},
            "banner": self.banner,
        }


def _load_json(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml
    except ImportError as exc:
        raise RuntimeError("PyYAML is required to load YAML driver specs") from exc
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def load_driverspec(path: str | Path) -> DriverSpec:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = _load_yaml(path)
    else:
        data = _load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"driver spec must be a mapping: {path}")
    spec = DriverSpec.from_dict(data)
    spec.validate()
    return spec


def save_driverspec(path: str | Path, spec: DriverSpec) -> None:
    path = Path(path)
    data = spec.as_dict()
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise RuntimeError("PyYAML is required to write YAML driver specs") from exc
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
