import os

from dotenv import load_dotenv

load_dotenv()

# Firebase
FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS", "./firebase.json")

# S3
AWS_ACCESS_KEY_ID = os.environ.get("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = os.environ.get("AWS_SECRET_ACCESS_KEY")
AWS_REGION = os.environ.get("AWS_REGION", "us-east-2")
S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME")
IMAGE_URL_EXPIRATION_SECONDS = int(os.getenv("IMAGE_URL_EXPIRATION_SECONDS", "3600"))

# HTTP
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Feed client
FEED_API_URL = os.getenv("FEED_API_URL", "http://localhost:8000")
FEED_TOKEN = os.getenv("FEED_TOKEN")
