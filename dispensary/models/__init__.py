from dispensary.models.user import User
from dispensary.models.product import Product
from dispensary.models.order import Order
from dispensary.models.order_item import OrderItem
from dispensary.models.appointment import Appointment
from dispensary.models.blog_post import BlogPost
from dispensary.models.notification import Notification
from dispensary.models.age_verification import AgeVerification
from dispensary.models.user_preference import UserPreference
from dispensary.models.conversation import ChatConversation
from dispensary.models.chat_message import ChatMessage
from dispensary.models.chat_agent import ChatAgent
from dispensary.models.ai_message_log import AIMessageLog
