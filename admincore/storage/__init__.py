"""Cache, queue and locker interfaces: memory and Redis caches, a memory queue and a Redis locker."""