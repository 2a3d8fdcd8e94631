"""Walk the auth endpoints of a running server: signup -> me -> rotate -> delete."""
import sys
import uuid

import httpx

BASE = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
client = httpx.Client(base_url=BASE, timeout=15)

username = f"smoke-{uuid.uuid4().hex[:8]}"

r = client.post("/auth/signup", json={"username": username, "password": "secret1"})
print(f"signup: {r.status_code}")
token = r.json()["token"]
headers = {"Authorization": f"Bearer {token}"}

r = client.get("/auth/me", headers=headers)
print(f"me: {r.status_code} {r.json()['user']['username']}")

r = client.post("/auth/signin", json={"username": username, "password": "wrong"})
print(f"signin (wrong password): {r.status_code} {r.json()['detail']}")

r = client.patch(
    "/auth/update-password",
    json={"currentPassword": "secret1", "newPassword": "secret2"},
    headers=headers,
)
print(f"update-password: {r.status_code} {r.json()['message']}")

r = client.post("/auth/signin", json={"username": username, "password": "secret2"})
print(f"signin (new password): {r.status_code}")

r = client.get("/auth/signout", headers=headers)
print(f"signout: {r.status_code} token={r.json()['token']}")

r = client.delete("/auth/delete", headers=headers)
print(f"delete: {r.status_code} {r.json()['message']}")

r = client.get("/auth/me", headers=headers)
print(f"me after delete: {r.status_code}")
