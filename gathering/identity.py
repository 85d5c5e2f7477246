# display name -> connection identity collapsing
from typing import Dict, Iterable, List, Optional, Set, Union

from .errors import MissingIdentityContext

Container = Union[Set[str], Dict[str, object]]


def find_by_name(display_name_of: Dict[str, str], name: str) -> Optional[str]:
    """
    First identity recorded under `name`, or None.
    """
    for identity, mapped in display_name_of.items():
        if mapped == name:
            return identity
    return None


def identities_for(
    display_name_of: Dict[str, str], name: str, identity: Optional[str] = None
) -> Set[str]:
    """
    Every identity recorded under `name`. The acting identity is included
    when given: whatever it recorded before (possibly under another name)
    is superseded by what it records now.
    """
    found = {i for i, mapped in display_name_of.items() if mapped == name}
    if identity is not None:
        found.add(identity)
    return found


def purge_by_name(
    containers: Iterable[Container],
    display_name_of: Dict[str, str],
    name: str,
    identity: Optional[str] = None,
) -> List[Container]:
    """
    Remove every stale identity for `name` from each set or dict.
    Returns new containers in the same order; the inputs are not touched.
    """
    stale = identities_for(display_name_of, name, identity)
    cleaned: List[Container] = []
    for c in containers:
        if isinstance(c, dict):
            cleaned.append({k: v for k, v in c.items() if k not in stale})
        else:
            cleaned.append({i for i in c if i not in stale})
    return cleaned


def require_identity(identity: Optional[str], name: Optional[str]) -> str:
    """
    Refuse actions without a resolved identity context.
    Returns the display name with surrounding whitespace removed.
    """
    name = (name or "").strip()
    if not identity or not name:
        raise MissingIdentityContext("identity and display name are required")
    return name
