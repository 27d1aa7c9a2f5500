import os

# Keep the test run off the MySQL default and away from any real API key
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ABSTRACTAPI_KEY"] = ""
