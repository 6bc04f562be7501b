import random, sys, time, threading, requests

BASE = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:5000"

VENDORS = ["Acme Rail", "Northern Fittings", "Steelway"]
ITEMS = ["Fishplate", "Sleeper", "Elastic Rail Clip", "Liner"]
seen = set()
lock = threading.Lock()

def worker_loop(n):
    for i in range(5):
        body = {
            "vendorName": random.choice(VENDORS),
            "lotNumber": f"L-{n:02d}-{i:03d}",
            "itemType": random.choice(ITEMS),
            "manufactureDate": "2024-01-15",
            "warrantyPeriod": "5 years",
        }
        r = requests.post(f"{BASE}/api/generate-pdf", json=body)
        data = r.json()
        print(n, r.status_code, data.get("filename") or data.get("error"))
        if data.get("success"):
            with lock:
                assert data["filename"] not in seen, "duplicate artifact name"
                seen.add(data["filename"])
        time.sleep(random.uniform(0.0, 0.05))

threads = [threading.Thread(target=worker_loop, args=(n,)) for n in range(8)]
[t.start() for t in threads]
[t.join() for t in threads]
print(f"{len(seen)} distinct certificates")
