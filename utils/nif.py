# utils/nif.py
"""Portuguese taxpayer number (NIF) check digit."""


def nif_check_digit(first_eight: str) -> int:
     """Mod-11 check digit for the first eight digits (weights 9..2)."""
     total = sum(int(digit) * (9 - i) for i, digit in enumerate(first_eight))
     check = 11 - total % 11
     return 0 if check >= 10 else check


def validate_nif(nif) -> bool:
     """True when nif is exactly nine ASCII digits with a valid check digit."""
     if not isinstance(nif, str) or len(nif) != 9:
          return False
     if not all("0" <= ch <= "9" for ch in nif):
          return False
     return nif_check_digit(nif[:8]) == int(nif[8])
