from dataclasses import dataclass
from pathlib import PurePosixPath


def to_bare_name(name: str) -> str:
    return PurePosixPath(name).name


@dataclass
class ScanItem:
    name: str
    size: int
    modified: str

    @classmethod
    def from_json(cls, item: dict) -> 'ScanItem':
        return cls(name=to_bare_name(item['name']),
                   size=int(item['size']),
                   modified=item.get('modified', ''))


@dataclass
class ScannerExtraStatus:
    firmware: str
    # False when running on battery power
    connected_to_external_power: bool
