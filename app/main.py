from dotenv import load_dotenv

from server import server

load_dotenv()

# Entrypoint: uvicorn main:server_app --host 0.0.0.0 --port 8000
server_app = server.handler
