"""活动修改授权单元测试"""

import pytest
from clubops.core.authz import can_mutate, can_publish_for, require_mutation
from clubops.core.exceptions import PermissionDeniedError
from clubops.core.models import Principal, UserRole


@pytest.mark.parametrize(
    "role,club_id,allowed",
    [
        (UserRole.ADMIN, None, True),
        (UserRole.ADMIN, "club-chess", True),
        (UserRole.CLUB_SECRETARY, "club-robotics", True),
        (UserRole.PRESIDENT, "club-robotics", True),
        (UserRole.TREASURER, "club-robotics", True),
        (UserRole.CLUB_SECRETARY, "club-chess", False),
        (UserRole.CLUB_SECRETARY, None, False),
        (UserRole.USER, "club-robotics", False),
    ],
)
def test_can_mutate(make_event, role, club_id, allowed):
    principal = Principal(user_id="u-1", role=role, club_id=club_id)
    event = make_event()

    assert can_mutate(principal, event) is allowed
    assert can_publish_for(principal, event.club_id) is allowed


def test_require_mutation_raises(make_event):
    principal = Principal(user_id="u-1", role=UserRole.USER)
    event = make_event()

    with pytest.raises(PermissionDeniedError) as exc_info:
        require_mutation(principal, event)
    assert exc_info.value.user_id == "u-1"
    assert exc_info.value.event_id == event.event_id
    assert exc_info.value.recoverable is False
