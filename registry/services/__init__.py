from registry.services.roster_service import (
    find_by_identity, add_player, get_player, list_players,
    update_player, deactivate_player, replace_player_identity,
)
from registry.services.carnival_service import (
    get_carnival, get_by_my_sideline_id, list_carnivals,
    import_carnival, create_carnival, edit_carnival,
)
from registry.services.registration_service import (
    FeeBreakdown, AttendanceStats,
    get_attendance, register_club_attendance, change_number_of_teams,
    approve_attendance, reject_attendance, withdraw_attendance, remove_attendance,
    list_attendances,
    get_assignment, assign_player, reassign_team, set_attendance_status,
    withdraw_player, reinstate_player, remove_player,
    list_assignments, get_team_sheet, get_attendance_stats,
    compute_fees,
)
from registry.services.claim_service import can_claim, claim_carnival
from registry.services.sponsor_service import (
    add_sponsor, find_sponsor, list_sponsors, sort_sponsors,
)
from registry.services.event_service import (
    CarnivalImported, CarnivalClaimed, PlayerRegistered,
    AttendanceCreated, PlayerAssigned,
    EventSink, LoggingEventSink, TelegramEventSink, format_event,
)

__all__ = [
    # roster
    "find_by_identity", "add_player", "get_player", "list_players",
    "update_player", "deactivate_player", "replace_player_identity",
    # carnivals
    "get_carnival", "get_by_my_sideline_id", "list_carnivals",
    "import_carnival", "create_carnival", "edit_carnival",
    # registration
    "FeeBreakdown", "AttendanceStats",
    "get_attendance", "register_club_attendance", "change_number_of_teams",
    "approve_attendance", "reject_attendance", "withdraw_attendance", "remove_attendance",
    "list_attendances",
    "get_assignment", "assign_player", "reassign_team", "set_attendance_status",
    "withdraw_player", "reinstate_player", "remove_player",
    "list_assignments", "get_team_sheet", "get_attendance_stats",
    "compute_fees",
    # claiming
    "can_claim", "claim_carnival",
    # sponsors
    "add_sponsor", "find_sponsor", "list_sponsors", "sort_sponsors",
    # events
    "CarnivalImported", "CarnivalClaimed", "PlayerRegistered",
    "AttendanceCreated", "PlayerAssigned",
    "EventSink", "LoggingEventSink", "TelegramEventSink", "format_event",
]
