# apps/applications/management/commands/seed_agency.py
import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from apps.accounts.models import StaffAccount
from apps.applications.models import (
    EpassportApplication,
    GraphicDesignJob,
    ProcessStatus,
    TodoPriority,
    VisaApplication,
)
from apps.applications.services import HandlerSnapshot
from apps.clients.models import CONTACT_MODES, Client, ClientCategory
from apps.clients.services import OPTIONAL_ADDRESS_CATEGORIES

SEED_DOMAIN = 'seed.agency.test'
SEED_PASSWORD = 'password123'


def yen(low, high, step=500):
    return Decimal(random.randrange(low, high + step, step))


class Command(BaseCommand):
    help = "Seed the database with staff, clients and applications for local development"

    def add_arguments(self, parser):
        parser.add_argument('--staff', type=int, default=4, help='Number of staff accounts to create')
        parser.add_argument('--clients', type=int, default=20, help='Number of clients to create')
        parser.add_argument('--applications', type=int, default=40, help='Number of applications to create')
        parser.add_argument('--clear', action='store_true', help='Clear seeded data before seeding')

    def handle(self, *args, **options):
        fake = Faker()
        jp = Faker('ja_JP')

        if options['clear']:
            self.stdout.write("🗑️ Clearing seeded staff, clients and applications...")
            self.clear()
            self.stdout.write("✅ Existing data cleared")

        with transaction.atomic():
            staff = self.seed_staff(fake, options['staff'])
            clients = self.seed_clients(fake, jp, options['clients'])
            counts = self.seed_applications(fake, jp, options['applications'], staff, clients)

        self.stdout.write(self.style.SUCCESS(
            f"🎉 Created {len(staff)} staff, {len(clients)} clients, "
            f"{counts['visa']} visa, {counts['epassport']} ePassport and {counts['design']} design applications"
        ))
        self.stdout.write(f"🔑 Seeded accounts log in with password '{SEED_PASSWORD}'")

    def clear(self):
        for model in (VisaApplication, EpassportApplication, GraphicDesignJob):
            model.objects.filter(client__email__endswith=f'@{SEED_DOMAIN}').delete()
        Client.objects.filter(email__endswith=f'@{SEED_DOMAIN}').delete()
        StaffAccount.objects.filter(email__endswith=f'@{SEED_DOMAIN}').delete()

    def seed_staff(self, fake, count):
        self.stdout.write(f"👥 Creating {count} staff accounts...")
        staff = []
        for i in range(count):
            email = f'staff{i + 1}.{fake.unique.user_name()}@{SEED_DOMAIN}'
            account = StaffAccount.objects.create_user(
                email=email,
                password=SEED_PASSWORD,
                full_name=fake.name(),
                phone=fake.phone_number()[:30],
                nationality=random.choice(['Nepali', 'Japanese', 'Indian', 'Vietnamese']),
                role=StaffAccount.ROLE_MANAGER if i % 3 == 2 else StaffAccount.ROLE_ADMIN,
            )
            staff.append(account)
            self.stdout.write(f"   ✅ {account.full_name} ({account.role})")
        return staff

    def seed_clients(self, fake, jp, count):
        self.stdout.write(f"🧑 Creating {count} clients...")
        clients = []
        for _ in range(count):
            category = random.choice(ClientCategory.values)
            client = Client(
                name=fake.name(),
                category=category,
                email=f'{fake.unique.user_name()}@{SEED_DOMAIN}',
                phone=jp.phone_number(),
                nationality=random.choice(['Nepali', 'Japanese', 'Sri Lankan', 'Bangladeshi']),
                mode_of_contact=random.sample(CONTACT_MODES, random.randint(1, 2)),
                date_joined=fake.date_between(start_date='-2y', end_date='today'),
            )
            if category not in OPTIONAL_ADDRESS_CATEGORIES or random.random() < 0.5:
                client.postal_code = jp.postcode()
                client.prefecture = jp.prefecture()
                client.city = jp.city()
                client.street = jp.town()
            client.set_password(SEED_PASSWORD)
            client.save()
            clients.append(client)
        return clients

    def seed_applications(self, fake, jp, count, staff, clients):
        counts = {'visa': 0, 'epassport': 0, 'design': 0}
        if not staff or not clients:
            self.stdout.write(self.style.ERROR("❌ No staff or clients to attach applications to."))
            return counts

        self.stdout.write(f"📄 Creating {count} applications...")
        for _ in range(count):
            client = random.choice(clients)
            common = {
                'client': client,
                'client_name': client.name,
                'handled_by': HandlerSnapshot.of(random.choice(staff)).as_dict(),
                'deadline': timezone.localdate() + timedelta(days=random.randint(-10, 60)),
                'notes': fake.sentence(),
                'todos': self.fake_todos(fake),
            }
            kind = random.choice(list(counts))
            if kind == 'visa':
                visa_fee = yen(5000, 30000)
                translation_fee = yen(0, 15000)
                VisaApplication.objects.create(
                    application_type=random.choice([VisaApplication.TYPE_VISITOR, VisaApplication.TYPE_STUDENT]),
                    country=fake.country(),
                    documents_to_translate=random.randint(0, 8),
                    visa_status=random.choice(ProcessStatus.values),
                    translation_handler=HandlerSnapshot.of(random.choice(staff)).as_dict(),
                    visa_application_fee=visa_fee,
                    translation_fee=translation_fee,
                    paid_amount=self.fake_payment(visa_fee + translation_fee),
                    **common,
                )
            elif kind == 'epassport':
                amount = yen(3000, 20000)
                EpassportApplication.objects.create(
                    mobile_no=jp.phone_number(),
                    application_type=random.choice(EpassportApplication.APPLICATION_TYPE_CHOICES)[0],
                    contact_channel=random.choice(EpassportApplication.CONTACT_CHANNEL_CHOICES)[0],
                    payment_method=random.choice(EpassportApplication.PAYMENT_METHOD_CHOICES)[0],
                    prefecture=jp.prefecture(),
                    ghumti_service=random.random() < 0.2,
                    amount=amount,
                    paid_amount=self.fake_payment(amount),
                    **common,
                )
            else:
                amount = yen(10000, 80000, step=1000)
                GraphicDesignJob.objects.create(
                    business_name=fake.company(),
                    mobile_no=jp.phone_number(),
                    address=jp.address(),
                    design_type=random.choice(['Logo', 'Flyer', 'Business Card', 'Menu', 'Website Banner']),
                    status=random.choice(GraphicDesignJob.STATUS_CHOICES)[0],
                    amount=amount,
                    discount=random.choice([Decimal('0'), Decimal('500'), Decimal('1000')]),
                    paid_amount=self.fake_payment(amount),
                    **common,
                )
            counts[kind] += 1
        return counts

    def fake_payment(self, total):
        """Unpaid, partly paid or fully paid, roughly a third each"""
        return random.choice([Decimal('0'), (total / 2).quantize(Decimal('1')), total])

    def fake_todos(self, fake):
        return [
            {
                'id': fake.uuid4().replace('-', ''),
                'task': fake.sentence(nb_words=4),
                'completed': random.random() < 0.4,
                'priority': random.choice(TodoPriority.values),
                'dueDate': fake.date_between(start_date='today', end_date='+30d').isoformat(),
            }
            for _ in range(random.randint(0, 3))
        ]
