from .tour_client import TourRoomClient

__all__ = ["TourRoomClient"]
