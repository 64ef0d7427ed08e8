"""
HTTP layer for IoT Hub.

Routers are mounted by iothub_web.main.create_app():
- iothub_web.auth_routes.router      (/api/user)
- iothub_web.device_routes.router    (/api/device)
- iothub_web.schedule_routes.router  (/api/schedule)
"""
