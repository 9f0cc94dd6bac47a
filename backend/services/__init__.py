"""
Services package - business logic layer.

  - account_service: users, sessions, client provisioning, subscriptions
  - auth_service: JWT session tokens
  - platform_transport: ordered transport chain (direct, public relays, private relay)
  - platform_service: Shopify operations and connection test
  - log_service: per-user activity log
  - sync_service: stock sync runs
"""
