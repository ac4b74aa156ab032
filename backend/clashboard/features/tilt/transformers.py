"""Data transformation utilities for the tilt feature."""

from typing import Sequence

from .detection import TiltDetection, TiltEvent
from .engine import TiltState
from .schemas import (
    TiltDetectionResponse,
    TiltEventResponse,
    TiltResponse,
    TiltStateResponse,
)


class TiltTransformer:
    """Data mapper for the tilt feature."""

    @staticmethod
    def to_response(
        state: TiltState,
        detection: TiltDetection,
        history: Sequence[TiltEvent] = (),
    ) -> TiltResponse:
        """Combine engine outputs into one API response."""
        return TiltResponse(
            state=TiltStateResponse(
                base_level=state.base_level,
                base_risk=state.base_risk,
                decay_stage=state.decay_stage,
                risk=state.risk,
                level=state.level,
                alert=state.alert,
                last_battle_at=state.last_battle_at,
                hours_since_last_battle=state.hours_since_last_battle,
            ),
            detection=TiltDetectionResponse(
                is_on_tilt=detection.is_on_tilt,
                consecutive_losses=detection.consecutive_losses,
                trophies_lost=detection.trophies_lost,
                suggested_action=detection.suggested_action,
            ),
            history=[
                TiltEventResponse(
                    start_time=event.start_time,
                    end_time=event.end_time,
                    consecutive_losses=event.consecutive_losses,
                    trophies_lost=event.trophies_lost,
                )
                for event in history
            ],
        )
