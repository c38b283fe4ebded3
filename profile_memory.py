from memory_profiler import profile
from fastapi.testclient import TestClient

from roombook.main import app

# Create a test client for the FastAPI app
client = TestClient(app)


@profile
def run_scenario():
    """
    Simple scenario to exercise the main endpoints while tracking memory.
    You don't need to assert anything here – it's only for profiling.
    """
    client.get("/health")
    client.get("/api/rooms")
    client.get("/api/bookings")
    client.get("/api/bookings/active")
    client.get("/api/ads")
    client.get("/api/settings/running-text")
    client.get("/api/reports")


if __name__ == "__main__":
    with client:
        run_scenario()
