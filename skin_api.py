"""
REST client for the skin tracker backend.

Catalog and inventory reads are cached on disk; loadout reads and writes
always hit the backend.
"""

import hashlib
import json
import os
import time

import requests
from loguru import logger

API_URL = os.environ.get("LOADOUT_API_URL", "http://localhost:5027/api").rstrip("/")
CACHE_DIR = os.path.join(os.path.dirname(__file__), ".cache")
CACHE_TTL = int(os.environ.get("LOADOUT_CACHE_TTL", "900"))  # seconds
CACHE_VERSION = 1  # Increment when the cached payload shape changes
REQUEST_TIMEOUT = 30


def _get_cache_path(path, params):
    key = hashlib.md5((path + json.dumps(params or {}, sort_keys=True)).encode()).hexdigest()
    return os.path.join(CACHE_DIR, f"{key}.json")


def _load_cache(cache_path):
    """Return cached data if present, fresh and written by this CACHE_VERSION."""
    if not os.path.exists(cache_path):
        return None
    try:
        with open(cache_path, "r", encoding="utf-8") as f:
            cached = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    if cached.get("version") != CACHE_VERSION:
        return None
    if time.time() - cached.get("timestamp", 0) >= CACHE_TTL:
        return None
    return cached.get("data")


def _save_cache(cache_path, data):
    os.makedirs(CACHE_DIR, exist_ok=True)
    with open(cache_path, "w", encoding="utf-8") as f:
        json.dump({"timestamp": time.time(), "version": CACHE_VERSION, "data": data}, f)


def _raise_for_backend_error(resp):
    """Raise with the backend's own message when it sends one."""
    if resp.ok:
        return
    try:
        body = resp.json()
    except ValueError:
        body = None
    message = body.get("message") if isinstance(body, dict) else None
    if message:
        raise RuntimeError(message)
    resp.raise_for_status()


def _get(path, params=None, use_cache=True):
    cache_path = _get_cache_path(path, params)
    if use_cache:
        cached = _load_cache(cache_path)
        if cached is not None:
            logger.debug(f"Cache hit for {path}")
            return cached

    resp = requests.get(f"{API_URL}{path}", params=params, timeout=REQUEST_TIMEOUT)
    _raise_for_backend_error(resp)
    data = resp.json()

    if use_cache:
        _save_cache(cache_path, data)
    return data


def clear_cache():
    """Remove every cached response."""
    if not os.path.isdir(CACHE_DIR):
        return
    for name in os.listdir(CACHE_DIR):
        if name.endswith(".json"):
            os.remove(os.path.join(CACHE_DIR, name))


def fetch_catalog():
    """Fetch the full skin catalog."""
    logger.info("Fetching skin catalog...")
    skins = _get("/skins")
    logger.info(f"  Found {len(skins)} skins")
    return skins


def fetch_inventory(user_id):
    """Fetch the items owned by a user."""
    logger.info(f"Fetching inventory for user {user_id}...")
    items = _get("/inventory", params={"userId": user_id})
    logger.info(f"  Found {len(items)} owned items")
    return items


def fetch_loadouts(user_id):
    return _get("/loadouts", params={"userId": user_id}, use_cache=False)


def upsert_loadout(loadout):
    """Create or overwrite a saved loadout. Returns the stored loadout."""
    resp = requests.post(f"{API_URL}/loadouts", json=loadout, timeout=REQUEST_TIMEOUT)
    _raise_for_backend_error(resp)
    saved = resp.json()
    logger.info(f"Saved loadout {saved.get('name')!r} ({len(saved.get('entries') or [])} entries)")
    return saved


def delete_loadout(loadout_id):
    resp = requests.delete(f"{API_URL}/loadouts/{loadout_id}", timeout=REQUEST_TIMEOUT)
    _raise_for_backend_error(resp)
    logger.info(f"Deleted loadout {loadout_id}")
