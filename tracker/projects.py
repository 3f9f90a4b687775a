import logging
from typing import Any, Dict, List, Tuple

from .errors import NotFoundError
from .validation import NewModule, NewProgramme, NewTask

logger = logging.getLogger(__name__)


def next_id(siblings: List[Dict[str, Any]]) -> int:
    """
    Id for a new entry in `siblings`: one more than the largest existing
    id, or 1 for an empty collection. Ids are only unique per parent.
    """
    if not siblings:
        return 1
    return max(item["id"] for item in siblings) + 1


def list_programmes(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    return document["programmes"]


def find_programme(document: Dict[str, Any], programme_id: int) -> Dict[str, Any]:
    for programme in document["programmes"]:
        if programme["id"] == programme_id:
            return programme
    raise NotFoundError("Programme not found")


def locate_module(document: Dict[str, Any], module_id: int) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Reverse lookup of a module by id alone.
    Programmes are scanned in order; the first module with a matching
    id wins. Returns (programme, module).
    """
    for programme in document["programmes"]:
        for module in programme["modules"]:
            if module["id"] == module_id:
                return programme, module
    raise NotFoundError("Module not found")


def module_view(document: Dict[str, Any], module_id: int) -> Dict[str, Any]:
    """Module copy annotated with its owning programme's id."""
    programme, module = locate_module(document, module_id)
    view = dict(module)
    view["programmeId"] = programme["id"]
    return view


def add_programme(document: Dict[str, Any], request: NewProgramme) -> Dict[str, Any]:
    programmes = document["programmes"]
    programme = {"id": next_id(programmes), "name": request.name, "modules": []}
    programmes.append(programme)
    logger.info("Created programme id=%s name=%r", programme["id"], programme["name"])
    return programme


def add_module(programme: Dict[str, Any], request: NewModule) -> Dict[str, Any]:
    modules = programme["modules"]
    module = {"id": next_id(modules), "name": request.name, "tasks": []}
    modules.append(module)
    logger.info(
        "Created module id=%s in programme id=%s name=%r",
        module["id"], programme["id"], module["name"],
    )
    return module


def add_task(module: Dict[str, Any], request: NewTask) -> Dict[str, Any]:
    tasks = module["tasks"]
    task = {"id": next_id(tasks), "name": request.name, "start": request.start, "end": request.end}
    tasks.append(task)
    logger.info("Created task id=%s in module id=%s name=%r", task["id"], module["id"], task["name"])
    return task
