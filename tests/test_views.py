import pytest

from netsume.services.views import (
    Admin,
    Auth,
    Dashboard,
    InvalidTransition,
    Loading,
    ProfileView,
    Report,
    from_dict,
    initial_view,
    sign_out,
    to_dict,
    transition,
)


def test_initial_view_resolution():
    assert initial_view(signed_in=False, profile_name=None) == Auth()
    assert initial_view(signed_in=True, profile_name="") == ProfileView()
    assert initial_view(signed_in=True, profile_name="Ada") == Dashboard()


@pytest.mark.parametrize(
    "current,target",
    [
        (Loading(), Auth()),
        (Loading(), Dashboard()),
        (Auth(), ProfileView()),
        (Dashboard(), ProfileView()),
        (ProfileView(), Dashboard()),
        (Dashboard(), Report(profile_id="p1")),
        (Report(profile_id="p1"), Dashboard()),
        (Dashboard(), Admin()),
        (Admin(), Dashboard()),
    ],
)
def test_allowed_transitions(current, target):
    assert transition(current, target) == target


@pytest.mark.parametrize(
    "current,target",
    [
        (ProfileView(), Report(profile_id="p1")),
        (Report(profile_id="p1"), Admin()),
        (Admin(), ProfileView()),
        (Auth(), Admin()),
        (Dashboard(), Loading()),
    ],
)
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidTransition):
        transition(current, target)


def test_sign_out_from_any_authenticated_view():
    for view in (ProfileView(), Dashboard(), Report(profile_id="p1"), Admin()):
        assert sign_out(view) == Auth()


def test_sign_out_requires_authenticated_view():
    with pytest.raises(InvalidTransition):
        sign_out(Auth())


def test_serialization_keeps_report_profile():
    view = Report(profile_id="p9")
    assert to_dict(view) == {"view": "report", "profile_id": "p9"}
    assert from_dict(to_dict(view)) == view


def test_unknown_view_is_rejected():
    with pytest.raises(InvalidTransition):
        from_dict({"view": "settings"})
    with pytest.raises(InvalidTransition):
        from_dict({"view": "report"})
