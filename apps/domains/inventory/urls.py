from rest_framework.routers import SimpleRouter

from .views import OrderViewSet, PartViewSet, StockViewSet

router = SimpleRouter()
router.register(r"parts", PartViewSet, basename="parts")
router.register(r"stock", StockViewSet, basename="stock")
router.register(r"orders", OrderViewSet, basename="orders")

urlpatterns = router.urls
