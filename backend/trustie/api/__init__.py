# HTTP layer: routes plus the dependencies they receive
