"""
View state machine of the client shell.

Each view is a frozen dataclass tagged by ``kind``; ``transition`` only
allows the fixed adjacency below and raises ``InvalidTransition`` otherwise.
"""

from dataclasses import asdict, dataclass
from typing import ClassVar, Dict, FrozenSet, Optional, Union


class InvalidTransition(ValueError):
    pass


@dataclass(frozen=True)
class Loading:
    kind: ClassVar[str] = "loading"


@dataclass(frozen=True)
class Auth:
    kind: ClassVar[str] = "auth"


@dataclass(frozen=True)
class ProfileView:
    kind: ClassVar[str] = "profile"


@dataclass(frozen=True)
class Dashboard:
    kind: ClassVar[str] = "dashboard"


@dataclass(frozen=True)
class Report:
    profile_id: str
    kind: ClassVar[str] = "report"


@dataclass(frozen=True)
class Admin:
    kind: ClassVar[str] = "admin"


ViewState = Union[Loading, Auth, ProfileView, Dashboard, Report, Admin]

AUTHENTICATED = frozenset({"profile", "dashboard", "report", "admin"})

ADJACENCY: Dict[str, FrozenSet[str]] = {
    "loading": frozenset({"auth", "profile", "dashboard", "report", "admin"}),
    "auth": frozenset({"profile", "dashboard"}),
    "profile": frozenset({"dashboard", "auth"}),
    "dashboard": frozenset({"profile", "report", "admin", "auth"}),
    "report": frozenset({"dashboard", "auth"}),
    "admin": frozenset({"dashboard", "auth"}),
}


def initial_view(signed_in: bool, profile_name: Optional[str]) -> ViewState:
    """Resolve the first view once the auth provider reports the session."""
    if not signed_in:
        return Auth()
    if profile_name:
        return Dashboard()
    return ProfileView()


def transition(current: ViewState, target: ViewState) -> ViewState:
    if target.kind not in ADJACENCY[current.kind]:
        raise InvalidTransition(f"Cannot move from {current.kind} to {target.kind}")
    return target


def sign_out(current: ViewState) -> ViewState:
    if current.kind not in AUTHENTICATED:
        raise InvalidTransition(f"Cannot sign out from {current.kind}")
    return transition(current, Auth())


def to_dict(view: ViewState) -> dict:
    return {"view": view.kind, **asdict(view)}


def from_dict(data: dict) -> ViewState:
    kind = data.get("view")
    if kind == "loading":
        return Loading()
    if kind == "auth":
        return Auth()
    if kind == "profile":
        return ProfileView()
    if kind == "dashboard":
        return Dashboard()
    if kind == "report":
        profile_id = data.get("profile_id")
        if not profile_id:
            raise InvalidTransition("The report view needs a profile_id")
        return Report(profile_id=profile_id)
    if kind == "admin":
        return Admin()
    raise InvalidTransition(f"Unknown view: {kind}")
