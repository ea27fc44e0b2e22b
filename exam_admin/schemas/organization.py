from datetime import date
from typing import Optional

from pydantic import ConfigDict

from exam_admin.schemas.base import CamelModel


class ContactInfo(CamelModel):
    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None


class OrganizationIn(CamelModel):
    organization_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    region: Optional[str] = None
    establishment_date: Optional[date] = None
    logo_url: Optional[str] = None
    status: Optional[str] = None
