from rest_framework.routers import SimpleRouter

from .views import CalendarEventViewSet, ContactRecordViewSet, LeadViewSet

reception_router = SimpleRouter()
reception_router.register(r"leads", LeadViewSet, basename="reception-leads")
reception_router.register(r"contact-history", ContactRecordViewSet, basename="reception-contacts")
reception_router.register(r"events", CalendarEventViewSet, basename="reception-events")

reception_urlpatterns = reception_router.urls
