from .frame_broadcaster import FrameBroadcaster, Subscriber, SubscriberHandle
