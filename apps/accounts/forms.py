"""
نماذج (Forms) الحسابات
Manassa - Bilingual E-Learning Platform
"""

from decimal import Decimal

from django import forms
from django.conf import settings
from django.contrib.auth import authenticate, password_validation
from django.contrib.auth.forms import AuthenticationForm

from .models import User


class LoginForm(AuthenticationForm):
    """تسجيل الدخول برقم الهاتف وكلمة المرور"""

    username = forms.CharField(
        label='رقم الهاتف',
        max_length=20,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'رقم الهاتف',
            'autofocus': True,
            'inputmode': 'tel',
        })
    )
    password = forms.CharField(
        label='كلمة المرور',
        strip=False,
        widget=forms.PasswordInput(attrs={
            'class': 'form-control',
            'placeholder': 'كلمة المرور',
        })
    )
    remember_me = forms.BooleanField(required=False, initial=True, label='تذكرني')

    error_messages = {
        'invalid_login': 'رقم الهاتف أو كلمة المرور غير صحيحة.',
        'inactive': 'هذا الحساب موقوف.',
    }

    def clean_username(self):
        return self.cleaned_data['username'].strip()


class DeviceConflictForm(forms.Form):
    """
    تأكيد تسجيل الخروج من الأجهزة الأخرى.
    يعيد التحقق من بيانات الدخول قبل طرد الجلسة القديمة.
    """

    phone_number = forms.CharField(
        label='رقم الهاتف',
        max_length=20,
        widget=forms.TextInput(attrs={'class': 'form-control', 'inputmode': 'tel'})
    )
    password = forms.CharField(
        label='كلمة المرور',
        strip=False,
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )

    def __init__(self, *args, request=None, **kwargs):
        self.request = request
        self.user = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        phone_number = (cleaned_data.get('phone_number') or '').strip()
        password = cleaned_data.get('password')
        if phone_number and password:
            user = authenticate(self.request, phone_number=phone_number, password=password)
            if user is None:
                raise forms.ValidationError('رقم الهاتف أو كلمة المرور غير صحيحة.')
            self.user = user
        return cleaned_data


class RegisterForm(forms.ModelForm):
    """إنشاء حساب طالب جديد"""

    password1 = forms.CharField(
        label='كلمة المرور',
        strip=False,
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )
    password2 = forms.CharField(
        label='تأكيد كلمة المرور',
        strip=False,
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )
    grade = forms.ChoiceField(label='الصف الدراسي', choices=())

    class Meta:
        model = User
        fields = ['full_name', 'phone_number', 'parent_phone_number', 'grade']
        widgets = {
            'full_name': forms.TextInput(attrs={'class': 'form-control'}),
            'phone_number': forms.TextInput(attrs={'class': 'form-control', 'inputmode': 'tel'}),
            'parent_phone_number': forms.TextInput(attrs={'class': 'form-control', 'inputmode': 'tel'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['parent_phone_number'].required = True
        self.fields['grade'].choices = [(g, g) for g in settings.STUDENT_GRADES]
        self.fields['grade'].widget.attrs['class'] = 'form-select'

    def clean_phone_number(self):
        phone_number = self.cleaned_data['phone_number'].strip()
        if User.objects.filter(phone_number=phone_number).exists():
            raise forms.ValidationError('رقم الهاتف مسجل مسبقاً.')
        return phone_number

    def clean(self):
        cleaned_data = super().clean()
        phone = cleaned_data.get('phone_number')
        parent_phone = (cleaned_data.get('parent_phone_number') or '').strip()
        if phone and parent_phone and phone == parent_phone:
            self.add_error('parent_phone_number', 'رقم ولي الأمر يجب أن يختلف عن رقم الطالب.')

        password1 = cleaned_data.get('password1')
        password2 = cleaned_data.get('password2')
        if password1 and password2 and password1 != password2:
            self.add_error('password2', 'كلمتا المرور غير متطابقتين.')
        elif password1:
            try:
                password_validation.validate_password(password1)
            except forms.ValidationError as e:
                self.add_error('password1', e)
        return cleaned_data

    def save(self, commit=True):
        user = super().save(commit=False)
        user.role = User.Role.STUDENT
        user.set_password(self.cleaned_data['password1'])
        if commit:
            user.save()
        return user


class ProfileUpdateForm(forms.ModelForm):
    """تحديث الملف الشخصي"""

    class Meta:
        model = User
        fields = ['full_name', 'email', 'parent_phone_number', 'image_url']
        widgets = {
            'full_name': forms.TextInput(attrs={'class': 'form-control'}),
            'email': forms.EmailInput(attrs={'class': 'form-control'}),
            'parent_phone_number': forms.TextInput(attrs={'class': 'form-control'}),
            'image_url': forms.URLInput(attrs={'class': 'form-control'}),
        }

    def clean_email(self):
        email = self.cleaned_data.get('email')
        if email and User.objects.filter(email=email).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError('البريد الإلكتروني مستخدم من حساب آخر.')
        return email


class ChangePasswordForm(forms.Form):
    """تغيير كلمة المرور"""

    current_password = forms.CharField(
        label='كلمة المرور الحالية',
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )
    new_password1 = forms.CharField(
        label='كلمة المرور الجديدة',
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )
    new_password2 = forms.CharField(
        label='تأكيد كلمة المرور',
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )

    def __init__(self, user, *args, **kwargs):
        self.user = user
        super().__init__(*args, **kwargs)

    def clean_current_password(self):
        current_password = self.cleaned_data.get('current_password')
        if not self.user.check_password(current_password):
            raise forms.ValidationError('كلمة المرور الحالية غير صحيحة.')
        return current_password

    def clean(self):
        cleaned_data = super().clean()
        password1 = cleaned_data.get('new_password1')
        password2 = cleaned_data.get('new_password2')
        if password1 and password2 and password1 != password2:
            raise forms.ValidationError('كلمتا المرور غير متطابقتين.')
        if password1:
            password_validation.validate_password(password1, self.user)
        return cleaned_data


class BalanceForm(forms.Form):
    """إضافة رصيد لطالب (للمدير)"""

    amount = forms.DecimalField(
        label='المبلغ',
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01'),
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
