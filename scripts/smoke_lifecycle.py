#!/usr/bin/env python3
"""
End-to-end smoke test against a running server
Run from the project root: python scripts/smoke_lifecycle.py [base_url]

Registers a sender and a carrier, walks one delivery through
requested -> accepted -> picked -> delivered and exchanges reviews.
"""
import asyncio
import sys
import uuid

import httpx

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:10000/api/v1"


class LifecycleTester:
    def __init__(self):
        self.client = httpx.AsyncClient(base_url=BASE_URL)
        self.tokens = {}
        self.users = {}

    async def register(self, alias: str, role: str):
        suffix = uuid.uuid4().hex[:8]
        response = await self.client.post("/auth/register", json={
            "username": f"{alias}_{suffix}",
            "password": "password123",
            "full_name": f"Smoke {alias.title()}",
            "role": role
        })
        response.raise_for_status()
        data = response.json()
        self.tokens[alias] = data["access_token"]
        self.users[alias] = data["user"]
        print(f"✅ Registered {alias}: id {data['user']['id']}")

    def headers(self, alias: str):
        return {"Authorization": f"Bearer {self.tokens[alias]}"}

    async def set_status(self, delivery_id: int, alias: str, status: str) -> httpx.Response:
        return await self.client.patch(
            f"/deliveries/{delivery_id}/status",
            json={"status": status},
            headers=self.headers(alias)
        )

    async def run(self) -> bool:
        await self.register("sender", "sender")
        await self.register("carrier", "carrier")

        response = await self.client.post("/deliveries", json={
            "pickup_location": "Pune",
            "drop_location": "Mumbai",
            "package_size": "medium",
            "package_weight": 3500,
            "preferred_delivery_date": "2023-06-22",
            "preferred_delivery_time": "Before 6:00 PM",
            "delivery_fee": 30000
        }, headers=self.headers("sender"))
        response.raise_for_status()
        delivery_id = response.json()["delivery"]["id"]
        print(f"✅ Delivery {delivery_id} requested")

        response = await self.set_status(delivery_id, "sender", "accepted")
        print(f"{'✅' if response.status_code == 403 else '❌'} Sender cannot accept own delivery ({response.status_code})")

        for status in ("accepted", "picked", "delivered"):
            response = await self.set_status(delivery_id, "carrier", status)
            if response.status_code != 200:
                print(f"❌ {status}: {response.status_code} {response.text}")
                return False
            print(f"✅ Delivery {delivery_id} {status}")

        response = await self.client.post("/reviews", json={
            "delivery_id": delivery_id,
            "reviewee_id": self.users["carrier"]["id"],
            "rating": 5,
            "comment": "Smooth delivery"
        }, headers=self.headers("sender"))
        print(f"{'✅' if response.status_code == 201 else '❌'} Sender reviewed carrier ({response.status_code})")

        response = await self.client.get(f"/users/{self.users['carrier']['id']}/profile")
        profile = response.json()["profile"]
        print(f"⭐ Carrier rating {profile['rating']} from {profile['total_reviews']} review(s)")

        response = await self.client.post("/reviews", json={
            "delivery_id": delivery_id,
            "reviewee_id": self.users["carrier"]["id"],
            "rating": 4
        }, headers=self.headers("sender"))
        print(f"{'✅' if response.status_code == 409 else '❌'} Duplicate review rejected ({response.status_code})")

        return True

    async def cleanup(self):
        await self.client.aclose()


async def main():
    tester = LifecycleTester()
    try:
        ok = await tester.run()
        print("\n🎉 SMOKE TEST PASSED" if ok else "\n❌ SMOKE TEST FAILED")
    except httpx.HTTPError as e:
        print(f"\n❌ HTTP error: {e}")
    finally:
        await tester.cleanup()


if __name__ == "__main__":
    print("🧪 DELIVERY LIFECYCLE SMOKE TEST")
    print(f"📋 Server: {BASE_URL}")
    asyncio.run(main())
