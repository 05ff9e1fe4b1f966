"""MQTT broadcaster for index queue events."""
import json
import logging
import time
from typing import Any, Optional

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)


class MQTTBroadcaster:
    """MQTT event broadcaster for index queue events."""

    def __init__(self, broker: str, port: int, topic: str):
        self.broker = broker
        self.port = port
        self.topic = topic
        self.client: Optional[mqtt.Client] = None
        self.connected = False

    def connect(self) -> bool:
        try:
            self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
            self.client.on_connect = self._on_connect
            self.client.connect(self.broker, self.port, keepalive=60)
            self.client.loop_start()
            self.connected = True
            return True
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to connect to MQTT broker: {e}")
            return False

    def disconnect(self):
        if self.client:
            self.client.loop_stop()
            self.client.disconnect()
            self.connected = False

    def publish_event(self, event_type: str, root_page_id: int, data: dict[str, Any]) -> bool:
        if not self.connected or not self.client:
            return False
        payload = {
            "root_page_id": root_page_id,
            "event_type": event_type,
            "timestamp": int(time.time()),
            **data,
        }
        result = self.client.publish(self.topic, json.dumps(payload), qos=1)
        return result.rc == mqtt.MQTT_ERR_SUCCESS

    def publish_retained(self, topic: str, payload: str, qos: int = 1) -> bool:
        """Publish a retained MQTT message."""
        if not self.connected or not self.client:
            return False
        result = self.client.publish(topic, payload, qos=qos, retain=True)
        return result.rc == mqtt.MQTT_ERR_SUCCESS

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        self.connected = not reason_code.is_failure


class NoOpBroadcaster:
    """No-operation broadcaster for testing or when MQTT disabled."""
    def connect(self) -> bool:
        return True
    def disconnect(self):
        pass
    def publish_event(self, event_type: str, root_page_id: int, data: dict[str, Any]) -> bool:
        return True
    def publish_retained(self, topic: str, payload: str, qos: int = 1) -> bool:
        return True


_broadcaster: Optional[MQTTBroadcaster | NoOpBroadcaster] = None

def get_broadcaster(broadcast_type: str, broker: str, port: int, topic: str):
    """Get or create global broadcaster instance."""
    global _broadcaster
    if _broadcaster is not None:
        return _broadcaster

    if broadcast_type == "mqtt":
        _broadcaster = MQTTBroadcaster(broker, port, topic)
        _broadcaster.connect()
    else:
        _broadcaster = NoOpBroadcaster()
        _broadcaster.connect()

    return _broadcaster

def shutdown_broadcaster():
    """Shutdown global broadcaster."""
    global _broadcaster
    if _broadcaster:
        _broadcaster.disconnect()
        _broadcaster = None
