# models/organization.py
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

HEADER_POSITIONS = ("left", "center", "right")
ROLES = ("owner", "user")

ORGANIZATION_FIELDS = ("name", "email", "phone", "address", "city", "postal_code", "country", "tax_number")


def _known(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass
class Organization:
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    tax_number: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    user_role: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Organization":
        values = _known(cls, data)
        values["id"] = str(values.get("id") or "")
        values["name"] = str(values.get("name") or "")
        return cls(**values)


@dataclass
class OrganizationSettings:
    """
    Paramètres d'en-tête de facture d'un établissement.
    Les valeurs absentes sont remplacées au rendu par 40 px / 100 % / center.
    """
    organization_id: Optional[str] = None
    id: Optional[str] = None
    logo_url: Optional[str] = None
    header_height: Optional[float] = None
    header_width: Optional[float] = None
    header_position: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    font_family: Optional[str] = None
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    show_logo: bool = True
    show_company_info: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrganizationSettings":
        values = _known(cls, data)
        if not values.get("logo_url"):
            values["logo_url"] = None
        if values.get("header_position") not in HEADER_POSITIONS:
            values["header_position"] = None
        for key in ("header_height", "header_width"):
            raw = values.get(key)
            try:
                values[key] = float(raw) if raw not in (None, "", 0) else None
            except (TypeError, ValueError):
                values[key] = None
        return cls(**values)

    def header_payload(self) -> Dict[str, Any]:
        return {
            "logo_url": self.logo_url,
            "header_height": self.header_height,
            "header_width": self.header_width,
            "header_position": self.header_position,
        }


@dataclass
class User:
    id: str
    email: str
    auth_id: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        values = _known(cls, data)
        values["id"] = str(values.get("id") or "")
        values["email"] = str(values.get("email") or "")
        values["is_admin"] = bool(values.get("is_admin"))
        return cls(**values)


@dataclass
class UserOrganization:
    id: str
    user_id: str
    organization_id: str
    role: str = "user"
    created_at: Optional[str] = None
    user: Optional[User] = None
    organization: Optional[Organization] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserOrganization":
        user = data.get("user")
        org = data.get("organization")
        return cls(
            id=str(data.get("id") or ""),
            user_id=str(data.get("user_id") or ""),
            organization_id=str(data.get("organization_id") or ""),
            role=data.get("role") if data.get("role") in ROLES else "user",
            created_at=data.get("created_at"),
            user=User.from_dict(user) if isinstance(user, Mapping) else None,
            organization=Organization.from_dict(org) if isinstance(org, Mapping) else None,
        )
