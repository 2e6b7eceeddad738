#!/usr/bin/env python3
"""
Generate a new JWT signing key for .env
"""

import secrets

print("=" * 60)
print("JWT Signing Key Generator")
print("=" * 60)
print()
print("Add this to your .env file as JWT_SECRET_KEY:")
print()
key = secrets.token_urlsafe(48)
print(f"JWT_SECRET_KEY={key}")
print()
print("⚠️  WARNING: Changing this key invalidates every access and")
print("   refresh token already issued. All users must sign in again.")
print("=" * 60)
