# booking_api.asgi: application servie par uvicorn (`booking_api.asgi:app`)
from booking_api.app_setup.factory import create_app

app = create_app()
