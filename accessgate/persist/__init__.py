"""Policy storage: adapter and watcher interfaces and the file adapters."""