from dataclasses import dataclass


@dataclass
class Account:
    ID: str = ""
    name: str = ""
    balance: float = 0.0
    legacy_field: str = ""
