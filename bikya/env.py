import os

from dotenv import load_dotenv

load_dotenv()

api_base_url = os.getenv("BIKYA_API_BASE_URL", "http://172.20.10.2:5000/api").rstrip("/")
request_timeout = float(os.getenv("BIKYA_REQUEST_TIMEOUT", "15"))
default_currency = os.getenv("BIKYA_CURRENCY", "INR")
merchant_name = os.getenv("BIKYA_MERCHANT_NAME", "Bikya Bike Rentals")
jwt_secret_key = os.getenv("JWT_SECRET_KEY")
razorpay_key_id = os.getenv("RAZORPAY_KEY_ID")
razorpay_key_secret = os.getenv("RAZORPAY_KEY_SECRET")
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
