# Services module for Card Field Scanner
# Contains business logic services

# Scan services are in services/impl/
# Import them directly from there:
# from services.impl.s1_camera_service import S1CameraService
# from services.impl.scan_session_service import ScanSessionService

__all__ = []
