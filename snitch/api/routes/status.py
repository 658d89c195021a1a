"""
snitch.api.routes.status — Presence and roster endpoints
=========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["status"])


# ---------------------------------------------------------------------------
# GET /rosters
# ---------------------------------------------------------------------------
@router.get("/rosters")
def get_rosters(request: Request):
    """Current occupants and live roster message of every tracked channel."""
    cfg = request.app.state.cfg
    presence = request.app.state.presence
    handles = request.app.state.notifications.snapshot()

    return [
        {
            "channel_id": str(channel_id),
            "participants": [
                str(pid) for pid in sorted(presence.snapshot(cfg.guild_id, channel_id))
            ],
            "notification_id": handles.get(channel_id),
        }
        for channel_id in cfg.tracked_channel_ids
    ]


# ---------------------------------------------------------------------------
# GET /presence
# ---------------------------------------------------------------------------
@router.get("/presence")
def get_presence(request: Request):
    """Every known voice placement in the target guild, tracked or not."""
    cfg = request.app.state.cfg
    occupancy = request.app.state.presence.occupancy(cfg.guild_id)

    placements = [
        (pid, channel_id)
        for channel_id, members in occupancy.items()
        for pid in members
    ]
    return [
        {"participant_id": str(pid), "channel_id": str(channel_id)}
        for pid, channel_id in sorted(placements)
    ]
