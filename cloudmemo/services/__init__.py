# Services package init
"""
CloudMemo Backend - Services Layer
====================================

What:  Business logic between routes (HTTP) and the two stores.
How:   Services take the db session and key-value store as arguments, apply
       the rules, and return Pydantic schemas or raise CloudMemoError
       subclasses.

Service Inventory:
    - KeyValueStore (abstract): Expiring string store interface
    - RedisKeyValueStore / MemoryKeyValueStore: Its two implementations
    - AuthService: Password check, token minting and lookup
    - MemoService: Memo CRUD plus cache fill and invalidation
    - ClipService: The single clip slot
"""
