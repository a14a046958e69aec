from cinemamax.client.session_store import SessionStore
from cinemamax.client.api_client import CinemaMaxClient
from cinemamax.exceptions.client import ApiError
