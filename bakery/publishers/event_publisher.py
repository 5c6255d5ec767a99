"""
RabbitMQ Event Publisher

Events tell page renderers and other instances which cached views are stale.
"""
import pika
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bakery.config import settings

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publisher for sending events to RabbitMQ"""
    
    def __init__(self):
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE
        self.enabled = settings.EVENTS_ENABLED
    
    def publish(
        self,
        event_type: str,
        routing_key: str,
        data: Dict,
        paths: Optional[List[str]] = None,
    ) -> bool:
        """
        Publish an event to the topic exchange
        
        Args:
            event_type: Event name, e.g. OrderCreated
            routing_key: Topic routing key
            data: Event payload
            paths: Views whose cached rendering must be revalidated
        
        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            return False
        
        try:
            connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            channel = connection.channel()
            
            channel.exchange_declare(
                exchange=self.exchange,
                exchange_type='topic',
                durable=True
            )
            
            event = {
                "event_type": event_type,
                "event_id": str(uuid.uuid4()),
                "event_version": "1.0",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "source": settings.SERVICE_NAME,
                "revalidate": paths or [],
                "data": data
            }
            
            channel.confirm_delivery()
            
            channel.basic_publish(
                exchange=self.exchange,
                routing_key=routing_key,
                body=json.dumps(event, default=str),
                properties=pika.BasicProperties(
                    delivery_mode=2,  # Persistent message
                    content_type='application/json',
                    correlation_id=event["event_id"]
                ),
                mandatory=False
            )
            
            connection.close()
            
            logger.info("✓ Event published: %s (ID: %s)", event_type, event["event_id"])
            return True
            
        except Exception as e:
            logger.warning("✗ Error publishing %s event: %s", event_type, e)
            return False
    
    def publish_order_created(self, order_data: Dict) -> bool:
        return self.publish("OrderCreated", "order.created", order_data, ["/orders", "/admin"])
    
    def publish_order_cancelled(self, order_data: Dict) -> bool:
        return self.publish("OrderCancelled", "order.cancelled", order_data, ["/orders", "/admin"])
    
    def publish_order_status_changed(self, order_data: Dict) -> bool:
        return self.publish("OrderStatusChanged", "order.status.changed", order_data, ["/orders", "/admin"])
    
    def publish_order_archived(self, order_data: Dict) -> bool:
        return self.publish("OrderArchived", "order.archived", order_data, ["/admin"])
    
    def publish_catalog_updated(self, catalog_data: Dict) -> bool:
        return self.publish("CatalogUpdated", "catalog.updated", catalog_data, ["/", "/admin"])
