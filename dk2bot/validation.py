"""Order form validation.

Rules run top-to-bottom in the order the form is filled in and stop at
the first failure, so the customer always sees one reason at a time.
"""

from __future__ import annotations

import re
from typing import Callable, NamedTuple

from dk2bot.models import Address, OrderDetails

POSTAL_CODE_RE = re.compile(r"^\d{5}$")
PHONE_RE = re.compile(r"^0[1-9](?:[ _.-]?\d{2}){4}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ValidationResult(NamedTuple):
    ok: bool
    reason: str | None = None


def is_address_complete(address: Address) -> bool:
    return address.is_complete


def is_valid_postal_code(value: str) -> bool:
    return bool(POSTAL_CODE_RE.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_RE.match(value))


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))


Rule = tuple[Callable[[OrderDetails], bool], str]

RULES: list[Rule] = [
    (
        lambda o: is_address_complete(o.pickup_address),
        "L'adresse de ramassage est incomplète. "
        "Veuillez vérifier la rue, la ville et le code postal.",
    ),
    (
        lambda o: is_valid_postal_code(o.pickup_address.postal_code),
        "Le code postal de ramassage est invalide. Il doit comporter 5 chiffres.",
    ),
    (
        lambda o: is_address_complete(o.delivery_address),
        "L'adresse de livraison est incomplète. "
        "Veuillez vérifier la rue, la ville et le code postal.",
    ),
    (
        lambda o: is_valid_postal_code(o.delivery_address.postal_code),
        "Le code postal de livraison est invalide. Il doit comporter 5 chiffres.",
    ),
    (
        lambda o: bool(o.pickup_datetime),
        "Veuillez sélectionner une date et une heure pour le ramassage.",
    ),
    (
        lambda o: bool(o.parcel.weight and o.parcel.contents),
        "Les détails du colis sont incomplets. "
        "Le poids et la description du contenu sont obligatoires.",
    ),
    (
        lambda o: bool(o.customer.name),
        "Veuillez saisir votre nom complet.",
    ),
    (
        lambda o: bool(o.customer.phone),
        "Veuillez saisir votre numéro de téléphone.",
    ),
    (
        lambda o: is_valid_phone(o.customer.phone),
        "Le format du numéro de téléphone est invalide. Il doit comporter "
        "10 chiffres et commencer par 0 (ex: 06 12 34 56 78).",
    ),
    (
        lambda o: bool(o.customer.email),
        "Une adresse e-mail est requise pour la confirmation.",
    ),
    (
        lambda o: is_valid_email(o.customer.email),
        "Le format de l'adresse e-mail est invalide.",
    ),
]


def validate_order(order: OrderDetails) -> ValidationResult:
    """Return the first failing rule's reason, or ``ok=True``."""
    for check, reason in RULES:
        if not check(order):
            return ValidationResult(False, reason)
    return ValidationResult(True)
