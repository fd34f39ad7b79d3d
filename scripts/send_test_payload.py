import os
import sys
import json
import requests
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

URL = os.getenv("DEPLOYHOOK_URL", f"http://127.0.0.1:{os.getenv('PORT', '8080')}/api/v1/data")
TOKEN = os.getenv("API_TOKEN", "")

# Payload to send
payload = {
    "ticket": sys.argv[1] if len(sys.argv) > 1 else "AB12",
    "firstname": "Thea",
    "lastname": "Queen",
}

headers = {"Content-Type": "application/json"}
if TOKEN:
    headers["token"] = TOKEN

# verify=False lets the script talk to a server using a self-signed certificate
resp = requests.post(URL, headers=headers, data=json.dumps(payload).encode("utf-8"),
                     verify=False, timeout=20)

print("Status:", resp.status_code)
print("Response:", resp.json())
