import os

import httpx
from dotenv import load_dotenv

# Manual smoke check against a running server:
#   uvicorn mediphant_server.main:app --port 8000
#   python scripts/smoke_api.py

load_dotenv()

SERVER_URL = os.getenv("MEDIPHANT_SERVER_URL", "http://localhost:8000")


def check_health():
    resp = httpx.get(f"{SERVER_URL}/health", timeout=10)
    print(f"Health: {resp.status_code} {resp.json()}")


def check_faq(question):
    print(f"\nAsking: {question!r}")
    resp = httpx.get(f"{SERVER_URL}/api/faq", params={"q": question}, timeout=30)
    print(f"Status Code: {resp.status_code}")
    if resp.status_code == 200:
        data = resp.json()
        print("Answer:", data["answer"])
        for match in data["matches"]:
            print(f"  {match['score']:.3f}  {match['text']}")
    else:
        print("Error response:")
        print(resp.text)


def check_interaction(med_a, med_b):
    print(f"\nChecking {med_a} + {med_b}")
    resp = httpx.post(
        f"{SERVER_URL}/api/interactions",
        json={"medA": med_a, "medB": med_b},
        timeout=10,
    )
    print(f"Status Code: {resp.status_code}")
    print(resp.json())


if __name__ == "__main__":
    try:
        check_health()
        check_faq("medication adherence diabetes")
        check_faq("zzxxyy nonexistent")
        check_interaction("warfarin", "ibuprofen")
        print("\nHistory:", httpx.get(f"{SERVER_URL}/api/history", timeout=10).json())
    except httpx.ConnectError:
        print("Could not connect to server. Is it running on port 8000?")
