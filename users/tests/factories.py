import factory
from branches.tests.factories import BranchFactory
from common.choices import UserRole
from factory.django import DjangoModelFactory
from users.actor import ActorContext
from users.models import User


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.LazyAttribute(lambda o: o.email)
    name = factory.Faker("name")
    role = UserRole.SELLER
    branch = factory.SubFactory(BranchFactory)
    password = factory.PostGenerationMethodCall("set_password", "secret123")

    @factory.post_generation
    def persist_password(self, create, extracted, **kwargs):
        if create:
            self.save(update_fields=["password"])


class AdminFactory(UserFactory):
    role = UserRole.ADMIN


def actor_for(user) -> ActorContext:
    return ActorContext.from_user(user)
