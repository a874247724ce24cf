# projects.py
from typing import List, Optional

from ..api import ApiClient
from ..models import Project, ProjectCreate, ProjectUpdate, build, parse, parse_list, payload


def create_project(client: ApiClient, name: str, description: Optional[str] = None,
                   location: Optional[str] = None, deadline: Optional[str] = None) -> Project:
    data = build(ProjectCreate, name=name, description=description, location=location, deadline=deadline)
    return parse(Project, client.post("/projects", payload(data)).get("project"))


def get_projects(client: ApiClient) -> List[Project]:
    return parse_list(Project, client.get("/projects").get("projects"))


def get_project_by_id(client: ApiClient, project_id: int) -> Project:
    return parse(Project, client.get(f"/projects/{project_id}").get("project"))


def update_project(client: ApiClient, project_id: int, **changes) -> Project:
    data = build(ProjectUpdate, **changes)
    return parse(Project, client.put(f"/projects/{project_id}", payload(data)).get("project"))


def delete_project(client: ApiClient, project_id: int) -> dict:
    return client.delete(f"/projects/{project_id}")
