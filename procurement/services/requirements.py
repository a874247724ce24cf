# requirements.py
from typing import List, Optional

from ..api import ApiClient
from ..models import Requirement, RequirementCreate, RequirementUpdate, build, parse, parse_list, payload


def add_requirement(client: ApiClient, project_id: int, item_name: str, quantity: float, unit: str,
                    rate: Optional[float] = None, category: Optional[str] = None,
                    description: Optional[str] = None) -> Requirement:
    data = build(RequirementCreate, project_id=project_id, item_name=item_name, quantity=quantity,
                 unit=unit, rate=rate, category=category, description=description)
    return parse(Requirement, client.post("/requirements", payload(data)).get("requirement"))


def get_requirements_by_project_id(client: ApiClient, project_id: int) -> List[Requirement]:
    body = client.get(f"/requirements/project/{project_id}")
    return parse_list(Requirement, body.get("requirements"))


def get_requirement_by_id(client: ApiClient, requirement_id: int) -> Requirement:
    return parse(Requirement, client.get(f"/requirements/{requirement_id}").get("requirement"))


def update_requirement(client: ApiClient, requirement_id: int, **changes) -> Requirement:
    data = build(RequirementUpdate, **changes)
    body = client.put(f"/requirements/{requirement_id}", payload(data))
    return parse(Requirement, body.get("requirement"))


def delete_requirement(client: ApiClient, requirement_id: int) -> dict:
    return client.delete(f"/requirements/{requirement_id}")
