#!/usr/bin/env python3
"""
Mock Bridge Client Script

This script drives a running Supabase Bridge through a full row lifecycle for
local testing: health check, insert, select, update and delete against one
table.

Usage:
    python mock-bridge-client.py

Configuration:
    Set BRIDGE_URL, BRIDGE_API_KEY and BRIDGE_TABLE environment variables or
    rely on the defaults below. The table must exist in Supabase and accept a
    `title` text column and a `status` text column.

Examples:
    export BRIDGE_URL="http://localhost:3000"
    export BRIDGE_API_KEY="my-shared-secret"
    export BRIDGE_TABLE="todos"
    python mock-bridge-client.py
"""

import os
import sys
import uuid
from typing import Any, Dict, Optional

import requests


class MockBridgeClient:
    """Client that exercises every Supabase Bridge endpoint."""

    def __init__(self, base_url: str, api_key: str, table: str):
        """Initialize the mock bridge client.

        Args:
            base_url: Bridge base URL (e.g., http://localhost:3000)
            api_key: Shared secret sent as x-api-key
            table: Supabase table to operate on
        """
        self.base_url = base_url.rstrip('/')
        self.table_url = f"{self.base_url}/api/{table}"
        self.session = requests.Session()
        self.session.headers.update({
            'x-api-key': api_key,
            'Content-Type': 'application/json'
        })

    def _report(self, response: requests.Response) -> Optional[Dict[str, Any]]:
        print(f"📊 Status: {response.status_code}")
        try:
            body = response.json()
        except ValueError:
            print(f"🔍 Response: {response.text}")
            return None
        print(f"🔍 Response: {body}")
        return body if response.ok else None

    def insert(self, row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert a row via POST /api/{table}."""
        print(f"\n🔄 Inserting row: {row}")
        try:
            return self._report(self.session.post(self.table_url, json=row))
        except requests.RequestException as e:
            print(f"💥 Request failed: {e}")
            return None

    def select(self, **params: str) -> Optional[Dict[str, Any]]:
        """Select rows via GET /api/{table}."""
        print(f"\n🔎 Selecting rows: {params or 'defaults'}")
        try:
            return self._report(self.session.get(self.table_url, params=params))
        except requests.RequestException as e:
            print(f"💥 Request failed: {e}")
            return None

    def update(self, row_filter: Dict[str, Any], data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update rows via PATCH /api/{table}."""
        print(f"\n✏️  Updating rows matching {row_filter} with {data}")
        try:
            return self._report(
                self.session.patch(self.table_url, json={'filter': row_filter, 'data': data})
            )
        except requests.RequestException as e:
            print(f"💥 Request failed: {e}")
            return None

    def delete(self, row_filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Delete rows via DELETE /api/{table}."""
        print(f"\n🗑️  Deleting rows matching {row_filter}")
        try:
            return self._report(self.session.delete(self.table_url, json={'filter': row_filter}))
        except requests.RequestException as e:
            print(f"💥 Request failed: {e}")
            return None

    def test_health_endpoint(self) -> bool:
        """Test the bridge health endpoint.

        Returns:
            True if healthy, False otherwise
        """
        url = f"{self.base_url}/health"

        print("🏥 Testing health endpoint...")

        try:
            # Plain request: the health endpoint doesn't require auth
            response = requests.get(url, timeout=5)
            print(f"📤 GET {url}")
            print(f"📊 Status: {response.status_code}")

            if response.status_code == 200:
                print("✅ Supabase Bridge is healthy!")
                return True
            print(f"⚠️  Health check failed: {response.status_code}")
            return False

        except requests.RequestException as e:
            print(f"💥 Health check failed: {e}")
            return False


def main():
    """Run the lifecycle scenario against a running bridge."""

    bridge_url = os.environ.get('BRIDGE_URL', 'http://localhost:3000')
    api_key = os.environ.get('BRIDGE_API_KEY', 'change-me-in-production')
    table = os.environ.get('BRIDGE_TABLE', 'todos')

    print("🚀 Mock Bridge Client")
    print("=" * 50)
    print(f"📡 Bridge URL: {bridge_url}")
    print(f"🔐 API Key: {api_key[:4]}{'*' * 8}")
    print(f"📋 Table: {table}")
    print()

    client = MockBridgeClient(bridge_url, api_key, table)

    if not client.test_health_endpoint():
        print("\n❌ Health check failed - is the bridge running?")
        print("   Try: supabase-bridge")
        sys.exit(1)

    title = f"bridge-smoke-{uuid.uuid4().hex[:8]}"

    if client.insert({'title': title, 'status': 'new'}) is None:
        print("❌ Insert failed, skipping remaining steps")
        sys.exit(1)

    client.select(select='title,status', limit='10', title=title)
    client.update({'title': title}, {'status': 'done'})
    client.select(title=title, status='done')
    client.delete({'title': title})

    print("\n" + "=" * 50)
    print("🎉 Bridge lifecycle complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
