"""YAML profiles holding the defaults a new transaction line starts from."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

UNIT_TYPES = ["Kg", "Litre", "Piece", "Box", "Meter", "Dozen", "Pack", "Other"]
GST_OPTIONS = [0.0, 5.0, 18.0, 40.0]


@dataclass
class ProfileConfig:
    """Line defaults and the choices offered to a form.

    Attributes:
        name: Profile name (file stem)
        description: Free text
        default_gst_percentage: Rate of a new product/service line
        default_unit_type: Unit of a new product line
        default_quantity: Quantity of a new product line
        gst_options: Rates offered in the rate picker
        unit_types: Unit labels offered in the unit picker
    """

    name: str
    description: str = ""
    default_gst_percentage: float = 18.0
    default_unit_type: str = "Piece"
    default_quantity: float = 1.0
    gst_options: List[float] = field(default_factory=lambda: list(GST_OPTIONS))
    unit_types: List[str] = field(default_factory=lambda: list(UNIT_TYPES))

    def __post_init__(self):
        """Validate the defaults against the offered choices."""
        if not self.default_unit_type:
            raise ValueError("default_unit_type must not be empty")
        if self.default_unit_type not in self.unit_types:
            raise ValueError(
                f"default_unit_type '{self.default_unit_type}' is not one of {self.unit_types}"
            )
        if not self.gst_options:
            raise ValueError("gst_options must not be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfileConfig':
        """Build a profile from parsed YAML; missing keys keep the built-in defaults."""
        values: Dict[str, Any] = {'name': data.get('name', 'default')}
        if 'description' in data:
            values['description'] = str(data['description'] or '')
        if 'default_gst_percentage' in data:
            values['default_gst_percentage'] = float(data['default_gst_percentage'])
        if 'default_unit_type' in data:
            values['default_unit_type'] = str(data['default_unit_type'])
        if 'default_quantity' in data:
            values['default_quantity'] = float(data['default_quantity'])
        if 'gst_options' in data:
            values['gst_options'] = [float(rate) for rate in data['gst_options'] or []]
        if 'unit_types' in data:
            values['unit_types'] = [str(unit) for unit in data['unit_types'] or []]
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_profiles_dir() -> Path:
    """Directory holding <name>.yaml profiles (configs/profiles at the project root)."""
    return Path(__file__).resolve().parents[2] / "configs" / "profiles"


def load_profile(profile_name: str = "default") -> ProfileConfig:
    """Load a profile by name.

    Args:
        profile_name: File stem under the profiles directory

    Returns:
        ProfileConfig

    Raises:
        FileNotFoundError: If no such profile file exists
        ValueError: If the file is not valid YAML, not a mapping, or holds
            values that fail validation
    """
    profile_path = get_profiles_dir() / f"{profile_name}.yaml"
    if not profile_path.is_file():
        raise FileNotFoundError(f"No profile '{profile_name}' at {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise ValueError(f"Profile '{profile_name}' is not valid YAML: {e}") from e

    if not isinstance(data, dict) or not data:
        raise ValueError(f"Profile '{profile_name}' must be a non-empty mapping")

    try:
        return ProfileConfig.from_dict({'name': profile_name, **data})
    except (TypeError, ValueError) as e:
        raise ValueError(f"Profile '{profile_name}' has invalid values: {e}") from e


def list_available_profiles() -> List[str]:
    """Names of the profiles on disk, sorted; ["default"] when there are none."""
    profiles_dir = get_profiles_dir()
    names = sorted(path.stem for path in profiles_dir.glob("*.yaml")) if profiles_dir.is_dir() else []
    return names or ["default"]


def get_default_profile() -> ProfileConfig:
    """The "default" profile, or the built-in defaults when its file is missing."""
    try:
        return load_profile("default")
    except FileNotFoundError:
        return ProfileConfig(name="default", description="Built-in GST defaults")
