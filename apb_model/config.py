"""
Configuration loader for APB transfer controller simulation.

Loads YAML scenario files describing the controller parameters, the
completer model and the stimulus applied to the controller.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from pathlib import Path
from enum import Enum
import yaml


class SetupDirection(Enum):
    """Source of the direction output during the Setup phase."""
    SELECTOR = "selector"      # Live direction selector (check)
    WRITE_FLAG = "write_flag"  # Separate external write-direction register


class TransferDirection(Enum):
    """Direction of a single-beat transfer."""
    WRITE = "write"
    READ = "read"

    @property
    def is_write(self) -> bool:
        """Check if this is a write transfer."""
        return self is TransferDirection.WRITE

    @property
    def is_read(self) -> bool:
        """Check if this is a read transfer."""
        return self is TransferDirection.READ


def parse_int(val: Any, default: int = 0) -> int:
    """Parse an integer value (int or string like '0xBEAD')."""
    if val is None:
        return default
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, int):
        return val
    if isinstance(val, str):
        return int(val, 0)  # Auto-detect base (0x for hex)
    raise ValueError(f"Cannot parse integer value: {val!r}")


@dataclass
class ControllerConfig:
    """
    Transfer controller parameters.

    Widths are in bits. Both address counters restart at reset_address.
    """
    addr_width: int = 32
    data_width: int = 32
    reset_address: int = 1
    setup_direction: SetupDirection = SetupDirection.SELECTOR

    def __post_init__(self):
        if isinstance(self.setup_direction, str):
            self.setup_direction = SetupDirection(self.setup_direction)

    @property
    def addr_mask(self) -> int:
        """Mask for address counter wraparound."""
        return (1 << self.addr_width) - 1

    @property
    def data_mask(self) -> int:
        """Mask for payload values."""
        return (1 << self.data_width) - 1

    def validate(self) -> None:
        """Validate configuration values."""
        if self.addr_width < 1 or self.addr_width > 64:
            raise ValueError("addr_width must be 1-64")
        if self.data_width < 1 or self.data_width > 64:
            raise ValueError("data_width must be 1-64")
        if self.reset_address < 0 or self.reset_address > self.addr_mask:
            raise ValueError(
                f"reset_address 0x{self.reset_address:X} does not fit in "
                f"{self.addr_width} bits"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "addr_width": self.addr_width,
            "data_width": self.data_width,
            "reset_address": self.reset_address,
            "setup_direction": self.setup_direction.value,
        }


@dataclass
class CompleterConfig:
    """
    Completer (responder) model parameters.

    The completer owns a word memory starting at base_address and holds
    ready low for wait_states Access cycles before completing a transfer.
    """
    wait_states: int = 0
    memory_words: int = 1024
    base_address: int = 0
    error_addresses: List[int] = field(default_factory=list)

    def validate(self) -> None:
        """Validate configuration values."""
        if self.wait_states < 0:
            raise ValueError("wait_states must be non-negative")
        if self.memory_words < 1:
            raise ValueError("memory_words must be at least 1")
        if self.base_address < 0:
            raise ValueError("base_address must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "wait_states": self.wait_states,
            "memory_words": self.memory_words,
            "base_address": self.base_address,
            "error_addresses": list(self.error_addresses),
        }


@dataclass
class StepConfig:
    """
    One stimulus step: a set of controller inputs held for `cycles` ticks.

    ready, read_data and slverr left as None are supplied by the completer
    (or default to low when the scenario has no completer).
    """
    cycles: int = 1
    reset: bool = False
    start: bool = False
    check: bool = False
    write_data: int = 0
    write_flag: bool = False
    ready: Optional[bool] = None
    read_data: Optional[int] = None
    slverr: Optional[bool] = None
    label: str = ""

    def validate(self) -> None:
        """Validate step values."""
        if self.cycles < 1:
            raise ValueError("step cycles must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization (omits defaults)."""
        data: Dict[str, Any] = {}
        defaults = StepConfig()
        for key in ("cycles", "reset", "start", "check", "write_data",
                    "write_flag", "ready", "read_data", "slverr", "label"):
            value = getattr(self, key)
            if value != getattr(defaults, key):
                data[key] = value
        return data


@dataclass
class TransferSpec:
    """A transaction-level transfer request for the requester model."""
    direction: TransferDirection = TransferDirection.WRITE
    data: int = 0
    idle_before: int = 0        # Idle cycles before presenting the request

    def validate(self) -> None:
        """Validate transfer values."""
        if self.idle_before < 0:
            raise ValueError("idle_before must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "direction": self.direction.value,
            "data": self.data,
            "idle_before": self.idle_before,
        }


@dataclass
class ScenarioConfig:
    """
    Complete simulation scenario.

    A scenario drives the controller either cycle by cycle (`steps`) or
    through the requester model (`transfers`). Both may not be mixed.
    """
    name: str = "scenario"
    description: str = ""
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    completer: Optional[CompleterConfig] = None
    steps: List[StepConfig] = field(default_factory=list)
    transfers: List[TransferSpec] = field(default_factory=list)
    max_cycles: int = 10000
    expected_write_address: Optional[int] = None
    expected_read_address: Optional[int] = None

    @property
    def is_transaction_level(self) -> bool:
        """Check if the scenario is driven by the requester model."""
        return bool(self.transfers)

    @property
    def total_step_cycles(self) -> int:
        """Number of cycles covered by the scripted steps."""
        return sum(step.cycles for step in self.steps)

    def validate(self) -> None:
        """Validate the whole scenario."""
        self.controller.validate()
        if self.completer is not None:
            self.completer.validate()
        if self.steps and self.transfers:
            raise ValueError("scenario cannot define both steps and transfers")
        if self.max_cycles < 1:
            raise ValueError("max_cycles must be at least 1")
        for step in self.steps:
            step.validate()
        for transfer in self.transfers:
            transfer.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        data: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "controller": self.controller.to_dict(),
            "max_cycles": self.max_cycles,
        }
        if self.completer is not None:
            data["completer"] = self.completer.to_dict()
        if self.steps:
            data["steps"] = [step.to_dict() for step in self.steps]
        if self.transfers:
            data["transfers"] = [t.to_dict() for t in self.transfers]
        expected = {}
        if self.expected_write_address is not None:
            expected["write_address"] = self.expected_write_address
        if self.expected_read_address is not None:
            expected["read_address"] = self.expected_read_address
        if expected:
            data["expected"] = expected
        return {"scenario": data}

    def save(self, path: Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def load_scenario_config(config_path: str | Path) -> ScenarioConfig:
    """
    Load scenario configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file.

    Returns:
        ScenarioConfig instance.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    return _parse_scenario_config(data or {})


def _parse_controller_config(data: Dict[str, Any]) -> ControllerConfig:
    """Parse a controller section."""
    return ControllerConfig(
        addr_width=parse_int(data.get("addr_width"), 32),
        data_width=parse_int(data.get("data_width"), 32),
        reset_address=parse_int(data.get("reset_address"), 1),
        setup_direction=SetupDirection(data.get("setup_direction", "selector")),
    )


def _parse_completer_config(data: Dict[str, Any]) -> CompleterConfig:
    """Parse a completer section."""
    return CompleterConfig(
        wait_states=parse_int(data.get("wait_states"), 0),
        memory_words=parse_int(data.get("memory_words"), 1024),
        base_address=parse_int(data.get("base_address"), 0),
        error_addresses=[parse_int(a) for a in data.get("error_addresses", [])],
    )


def _parse_step(data: Dict[str, Any]) -> StepConfig:
    """Parse a single stimulus step."""
    known = {"cycles", "reset", "start", "check", "write_data", "write_flag",
             "ready", "read_data", "slverr", "label"}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown step fields: {sorted(unknown)}")

    def optional_bool(key: str) -> Optional[bool]:
        value = data.get(key)
        return None if value is None else bool(value)

    read_data = data.get("read_data")
    return StepConfig(
        cycles=parse_int(data.get("cycles"), 1),
        reset=bool(data.get("reset", False)),
        start=bool(data.get("start", False)),
        check=bool(data.get("check", False)),
        write_data=parse_int(data.get("write_data"), 0),
        write_flag=bool(data.get("write_flag", False)),
        ready=optional_bool("ready"),
        read_data=None if read_data is None else parse_int(read_data),
        slverr=optional_bool("slverr"),
        label=data.get("label", ""),
    )


def _parse_transfer(data: Dict[str, Any]) -> TransferSpec:
    """Parse a single transaction-level transfer."""
    return TransferSpec(
        direction=TransferDirection(data.get("direction", "write")),
        data=parse_int(data.get("data"), 0),
        idle_before=parse_int(data.get("idle_before"), 0),
    )


def _parse_scenario_config(data: Dict[str, Any]) -> ScenarioConfig:
    """Parse YAML data into ScenarioConfig."""
    scenario = data.get("scenario", data)  # Support both nested and flat format

    completer_data = scenario.get("completer")
    expected = scenario.get("expected") or {}
    expected_write = expected.get("write_address")
    expected_read = expected.get("read_address")

    config = ScenarioConfig(
        name=scenario.get("name", "scenario"),
        description=scenario.get("description", ""),
        controller=_parse_controller_config(scenario.get("controller") or {}),
        completer=(
            _parse_completer_config(completer_data)
            if completer_data is not None else None
        ),
        steps=[_parse_step(s) for s in scenario.get("steps", [])],
        transfers=[_parse_transfer(t) for t in scenario.get("transfers", [])],
        max_cycles=parse_int(scenario.get("max_cycles"), 10000),
        expected_write_address=(
            None if expected_write is None else parse_int(expected_write)
        ),
        expected_read_address=(
            None if expected_read is None else parse_int(expected_read)
        ),
    )

    config.validate()
    return config


def get_default_controller_config() -> ControllerConfig:
    """Get default controller configuration."""
    return ControllerConfig()
