import click

from foodbridge.services.expiry_service import expire_listings
from foodbridge.services.profile_service import register_user


def register_commands(app):
	@app.cli.command("expire-listings")
	def expire_listings_command():
		"""Mark available listings past their expiry time as expired."""
		expired = expire_listings()
		click.echo(f"Expired {len(expired)} listing(s)")

	@app.cli.command("create-admin")
	@click.argument("email")
	@click.argument("name")
	@click.password_option()
	def create_admin_command(email, name, password):
		"""Create an administrator account."""
		user = register_user(email, password, name, "admin", allowed_roles={"admin"})
		click.echo(f"Created admin {user.email} ({user.id})")
