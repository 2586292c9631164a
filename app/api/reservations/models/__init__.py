from .model_reservation import ReservationModel, ReservationStatus, ACTIVE_RESERVATION_STATUSES

__all__ = ["ReservationModel", "ReservationStatus", "ACTIVE_RESERVATION_STATUSES"]
